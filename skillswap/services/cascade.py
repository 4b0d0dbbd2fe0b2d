"""Deletes that take dependent rows with them.

Swap requests and ratings are never removed on their own; they only go away
when a user or skill they reference is deleted.
"""
from sqlalchemy import delete, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..models.notification import Notification
from ..models.profile import Profile
from ..models.rating import Rating
from ..models.skill import Skill
from ..models.swaps import SwapRequest
from ..models.user import User
from ..utils.logger import get_logger
from . import messages

logger = get_logger(__name__)


async def _delete_swaps(session: AsyncSession, swap_filter) -> None:
    swap_ids = select(SwapRequest.id).where(swap_filter)
    await session.execute(delete(Rating).where(Rating.swap_id.in_(swap_ids)))
    await session.execute(delete(SwapRequest).where(swap_filter))


async def delete_skill(session: AsyncSession, skill: Skill) -> None:
    await _delete_swaps(
        session,
        or_(SwapRequest.offered_skill_id == skill.id, SwapRequest.requested_skill_id == skill.id),
    )
    await session.delete(skill)
    await session.commit()
    logger.info("Skill %s deleted with its swap requests", skill.id)


async def delete_user(session: AsyncSession, user: User) -> None:
    user_id = user.id
    skill_ids = select(Skill.id).where(Skill.user_id == user_id)
    await _delete_swaps(
        session,
        or_(
            SwapRequest.sender_id == user_id,
            SwapRequest.receiver_id == user_id,
            SwapRequest.offered_skill_id.in_(skill_ids),
            SwapRequest.requested_skill_id.in_(skill_ids),
        ),
    )
    await session.execute(delete(Rating).where(or_(Rating.rater_id == user_id, Rating.rated_id == user_id)))
    await session.execute(delete(Notification).where(Notification.user_id == user_id))
    await session.execute(delete(Skill).where(Skill.user_id == user_id))
    await session.execute(delete(Profile).where(Profile.user_id == user_id))
    await session.delete(user)
    await session.commit()
    messages.get_collection().delete_many({"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]})
    logger.info("User %s deleted with profile, skills, swaps, ratings, notifications and messages", user_id)
