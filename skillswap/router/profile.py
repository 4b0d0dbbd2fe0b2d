from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import NotFound, ValidationError
from ..db import get_session
from ..models.profile import MeRead, Profile, ProfileDetail, ProfileRead
from ..models.skill import Skill, SkillType
from ..models.swaps import SwapRequest, SwapStatus
from ..models.user import User, UserRead
from ..services.ratings import average_rating, round_half_up
from ..utils.auth import get_current_user
from ..utils.logger import get_logger
from ..utils.utils import delete_file, save_profile_photo

router = APIRouter()
logger = get_logger(__name__)

ALLOWED_PHOTO_TYPES = {"image/jpeg", "image/png", "image/gif"}
MAX_PHOTO_BYTES = 2 * 1024 * 1024


@router.get("/{user_id}", response_model=ProfileDetail)
async def get_profile(user_id: int, session: AsyncSession = Depends(get_session)):
    result = await session.execute(
        select(Profile).options(selectinload(Profile.user)).where(Profile.user_id == user_id)
    )
    profile = result.scalar_one_or_none()
    if not profile:
        raise NotFound("Profile not found")

    total_swaps = await session.execute(
        select(func.count(SwapRequest.id))
        .where(or_(SwapRequest.sender_id == user_id, SwapRequest.receiver_id == user_id))
        .where(SwapRequest.status == SwapStatus.COMPLETED.value)
    )

    skills = await session.execute(
        select(Skill).options(selectinload(Skill.category)).where(Skill.user_id == user_id).order_by(Skill.id)
    )
    skills = skills.scalars().all()

    return ProfileDetail(
        profile=ProfileRead.model_validate(profile),
        user=UserRead.model_validate(profile.user),
        avg_rating=round_half_up(await average_rating(session, user_id), 1),
        total_swaps=total_swaps.scalar_one(),
        skills_offered=[skill.to_read() for skill in skills if skill.type == SkillType.OFFER.value],
        skills_wanted=[skill.to_read() for skill in skills if skill.type == SkillType.REQUEST.value],
    )


@router.put("", response_model=MeRead)
async def update_profile(
    name: Optional[str] = Form(None, min_length=1, max_length=255),
    bio: Optional[str] = Form(None, max_length=1000),
    location: Optional[str] = Form(None, max_length=255),
    photo: UploadFile = File(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    db_user = await session.get(User, current_user.id)
    if name is not None:
        db_user.name = name
        db_user.updated_at = datetime.utcnow()

    result = await session.execute(select(Profile).where(Profile.user_id == db_user.id))
    profile = result.scalar_one_or_none()
    if not profile:
        profile = Profile(user_id=db_user.id)
        session.add(profile)

    if bio is not None:
        profile.bio = bio
    if location is not None:
        profile.location = location

    # Handle profile photo upload if provided
    if photo:
        if photo.content_type not in ALLOWED_PHOTO_TYPES:
            raise ValidationError("photo", "The photo must be a file of type: jpeg, png, jpg, gif.")
        if photo.size is not None and photo.size > MAX_PHOTO_BYTES:
            raise ValidationError("photo", "The photo may not be greater than 2048 kilobytes.")
        old_photo = profile.photo
        profile.photo = await save_profile_photo(db_user.id, photo)
        if old_photo:
            delete_file(old_photo.get("url"))

    profile.updated_at = datetime.utcnow()
    await session.commit()
    await session.refresh(db_user)
    await session.refresh(profile)
    logger.info("User %s updated their profile", db_user.id)

    return MeRead(**UserRead.model_validate(db_user).model_dump(), profile=ProfileRead.model_validate(profile))
