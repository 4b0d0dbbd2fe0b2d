import os

from fastapi import FastAPI
from contextlib import asynccontextmanager
from fastapi.staticfiles import StaticFiles

from . import db
from . import router
from .core import config
from .core.exceptions import register_exception_handlers
from .db import mongodb
from .utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await db.create_tables()
    mongodb.get_db().ensure_indexes()
    yield
    if db.engine is not None:
        await db.close_session()
    mongodb.close_mongoDB()


def create_media_directory_if_not_exists(media_root: str):
    if not os.path.exists(media_root):
        logger.info("Creating directory: %s", media_root)
        os.makedirs(media_root)


def create_app(settings=None):
    if not settings:
        settings = config.get_settings()

    app = FastAPI(title="SkillSwap", lifespan=lifespan)

    db.init_db(settings)
    mongodb.init_mongoDB(settings)
    register_exception_handlers(app)
    router.init_router_root(app)
    app.include_router(router.get_router(), prefix="/api")

    create_media_directory_if_not_exists(settings.MEDIA_ROOT)
    app.mount("/media", StaticFiles(directory=settings.MEDIA_ROOT), name="media")

    return app
