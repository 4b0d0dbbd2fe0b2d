"""Domain errors raised by the services and their HTTP rendering.

Every error is an ``HTTPException`` so routers and services can raise them
directly and FastAPI turns them into JSON responses.
"""
from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ..utils.logger import get_logger

logger = get_logger(__name__)


class SkillSwapError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail):
        super().__init__(status_code=self.status_code, detail=detail)


class ValidationError(SkillSwapError):
    """Field-level input error, rendered like FastAPI's request validation."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__([{"loc": ["body", field], "msg": message, "type": "value_error"}])


class NotFound(SkillSwapError):
    status_code = status.HTTP_404_NOT_FOUND


class Forbidden(SkillSwapError):
    status_code = status.HTTP_403_FORBIDDEN


class Conflict(SkillSwapError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class InvalidOperation(SkillSwapError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


def register_exception_handlers(app: FastAPI):
    @app.exception_handler(SkillSwapError)
    async def skillswap_error_handler(request: Request, exc: SkillSwapError):
        logger.info("%s %s -> %s %s", request.method, request.url.path, exc.status_code, type(exc).__name__)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error"},
        )
