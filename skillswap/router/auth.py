from datetime import timedelta

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from fastapi.templating import Jinja2Templates
from jose import JWTError
from pydantic import EmailStr
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.config import get_settings
from ..core.exceptions import Forbidden, ValidationError
from ..db import get_session
from ..models.profile import MeRead, Profile, ProfileRead
from ..models.user import User, UserLoginInput, UserRead
from ..utils.auth import (
    create_access_token,
    create_verification_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from ..utils.email import TEMPLATE_DIR, send_verification_email
from ..utils.logger import get_logger

router = APIRouter()
settings = get_settings()
templates = Jinja2Templates(directory=TEMPLATE_DIR)
logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8


async def _send_verification(user: User):
    verification_token = create_verification_token(user.email)
    verification_url = f"{settings.BASE_URL}/auth/verify-email?token={verification_token}"
    await send_verification_email(user.email, user.name, verification_url)


async def _authenticate(session: AsyncSession, email: str, password: str) -> dict:
    user = await session.execute(select(User).where(User.email == email))
    user = user.scalar_one_or_none()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_verified:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email not verified",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if user.is_blocked:
        raise Forbidden("Your account has been blocked")

    access_token = create_access_token(
        data={"sub": user.email},
        expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    logger.info("User %s logged in", user.id)
    return {"access_token": access_token, "token_type": "bearer", "user": UserRead.model_validate(user)}


@router.post("/register", response_model=MeRead, status_code=status.HTTP_201_CREATED)
async def register_user(
    name: str = Form(..., min_length=1, max_length=255),
    email: EmailStr = Form(...),
    password: str = Form(...),
    session: AsyncSession = Depends(get_session)
):
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError("password", f"The password must be at least {MIN_PASSWORD_LENGTH} characters.")

    existing_user = await session.execute(select(User).where(User.email == email))
    if existing_user.scalar_one_or_none():
        raise ValidationError("email", "The email has already been taken.")

    db_user = User(name=name, email=email, hashed_password=get_password_hash(password))
    session.add(db_user)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError("email", "The email has already been taken.")
    await session.refresh(db_user)

    profile = Profile(user_id=db_user.id)
    session.add(profile)
    await session.commit()
    await session.refresh(profile)
    logger.info("Registered user %s", db_user.id)

    await _send_verification(db_user)

    return MeRead(**UserRead.model_validate(db_user).model_dump(), profile=ProfileRead.model_validate(profile))


@router.get("/verify-email")
async def verify_email(token: str, request: Request, session: AsyncSession = Depends(get_session)):
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    email = payload.get("sub")
    if email is None or payload.get("purpose") != "verify":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid token")

    db_user = await session.execute(select(User).where(User.email == email))
    db_user = db_user.scalar_one_or_none()
    if not db_user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    db_user.is_verified = True
    await session.commit()
    logger.info("User %s verified their email", db_user.id)

    return templates.TemplateResponse(
        request=request, name="email_verify_success.html", context={"message": "Email verified successfully"}
    )


@router.post("/resend-verification")
async def resend_verification_link(
    email: EmailStr = Form(...),
    session: AsyncSession = Depends(get_session)
):
    result = await session.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if user.is_verified:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User is already verified")
    await _send_verification(user)
    return {"message": "Verification email resent successfully"}


@router.post("/login")
async def login(
    user_input: UserLoginInput,
    session: AsyncSession = Depends(get_session)
):
    return await _authenticate(session, user_input.username, user_input.password)


@router.post("/token")
async def login_for_access_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session)
):
    return await _authenticate(session, form_data.username, form_data.password)
