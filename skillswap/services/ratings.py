"""Rating ledger: one rating per rater per completed swap.

Each new rating recomputes the rated user's reputation score from scratch as
the mean of every rating they have received.
"""
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import Conflict, Forbidden, InvalidOperation, ValidationError
from ..models.profile import Profile
from ..models.rating import Rating, RatingCreate
from ..models.swaps import SwapRequest, SwapStatus
from ..models.user import User
from ..utils.logger import get_logger

logger = get_logger(__name__)


def round_half_up(value: Optional[float], places: int) -> float:
    if value is None:
        return 0.0
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def with_relations(statement):
    return statement.options(
        selectinload(Rating.rater).selectinload(User.profile),
        selectinload(Rating.rated).selectinload(User.profile),
    )


async def average_rating(session: AsyncSession, user_id: int) -> Optional[float]:
    result = await session.execute(select(func.avg(Rating.rating)).where(Rating.rated_id == user_id))
    return result.scalar_one()


async def recompute_reputation(session: AsyncSession, user_id: int) -> Optional[float]:
    profile = await session.execute(select(Profile).where(Profile.user_id == user_id))
    profile = profile.scalar_one_or_none()
    if not profile:
        return None

    profile.reputation_score = round_half_up(await average_rating(session, user_id), 2)
    await session.commit()
    return profile.reputation_score


async def submit_rating(session: AsyncSession, rater: User, payload: RatingCreate) -> Rating:
    swap = await session.get(SwapRequest, payload.swap_id)
    if not swap:
        raise ValidationError("swap_id", "The selected swap id is invalid.")

    if swap.status != SwapStatus.COMPLETED.value:
        raise InvalidOperation("Can only rate completed swaps")

    if not swap.is_participant(rater.id):
        raise Forbidden("Only swap participants can rate a swap")

    if not isinstance(payload.rating, int) or not 1 <= payload.rating <= 5:
        raise ValidationError("rating", "The rating must be an integer between 1 and 5.")

    # rated_id is trusted as given, it is not checked against the swap's counterparty
    rated = await session.get(User, payload.rated_id)
    if not rated:
        raise ValidationError("rated_id", "The selected rated id is invalid.")

    existing = await session.execute(
        select(Rating.id).where(Rating.swap_id == swap.id).where(Rating.rater_id == rater.id)
    )
    if existing.first():
        raise Conflict("You have already rated this swap")

    rating = Rating(
        swap_id=swap.id,
        rater_id=rater.id,
        rated_id=payload.rated_id,
        rating=payload.rating,
        review=payload.review,
    )
    session.add(rating)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("You have already rated this swap")
    rating_id = rating.id

    score = await recompute_reputation(session, payload.rated_id)
    logger.info(
        "User %s rated user %s %s for swap %s, reputation now %s",
        rater.id, payload.rated_id, payload.rating, swap.id, score,
    )

    result = await session.execute(
        with_relations(select(Rating)).where(Rating.id == rating_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def ratings_for_user(session: AsyncSession, user_id: int) -> Tuple[List[Rating], float, int]:
    result = await session.execute(
        with_relations(select(Rating))
        .where(Rating.rated_id == user_id)
        .order_by(Rating.created_at.desc(), Rating.id.desc())
    )
    ratings = result.scalars().all()
    avg = await average_rating(session, user_id)
    return ratings, round_half_up(avg, 1), len(ratings)


async def ratings_for_swap(session: AsyncSession, swap_id: int) -> List[Rating]:
    result = await session.execute(
        with_relations(select(Rating)).where(Rating.swap_id == swap_id).order_by(Rating.created_at)
    )
    return result.scalars().all()
