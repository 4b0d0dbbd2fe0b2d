"""Swap lifecycle engine.

A swap request starts ``pending``. Only the receiver may accept or reject it,
while either participant may mark it ``completed`` from any status. Every
state change is followed by one notification to the other participant; the
two writes are separate commits, so a failed notification leaves the status
change in place.
"""
from datetime import datetime
from typing import List, Optional, Tuple, Union

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import Conflict, Forbidden, InvalidOperation, NotFound, ValidationError
from ..models.notification import NotificationType
from ..models.rating import Rating
from ..models.skill import Skill
from ..models.swaps import SwapCreate, SwapRequest, SwapStatus
from ..models.user import User
from ..utils.logger import get_logger
from ..utils.pagination import paginate
from . import notifications

logger = get_logger(__name__)

SWAPS_PER_PAGE = 10

TRANSITION_STATUSES = (SwapStatus.ACCEPTED, SwapStatus.REJECTED, SwapStatus.COMPLETED)


def with_relations(statement):
    return statement.options(
        selectinload(SwapRequest.sender).selectinload(User.profile),
        selectinload(SwapRequest.receiver).selectinload(User.profile),
        selectinload(SwapRequest.offered_skill),
        selectinload(SwapRequest.requested_skill),
    )


async def load_swap(session: AsyncSession, swap_id: int) -> Optional[SwapRequest]:
    result = await session.execute(
        with_relations(select(SwapRequest))
        .where(SwapRequest.id == swap_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_swap(session: AsyncSession, swap_id: int) -> SwapRequest:
    swap = await load_swap(session, swap_id)
    if not swap:
        raise NotFound("Swap request not found")
    return swap


async def propose_swap(session: AsyncSession, sender: User, payload: SwapCreate) -> SwapRequest:
    if payload.receiver_id == sender.id:
        raise InvalidOperation("Cannot send request to yourself")

    receiver = await session.get(User, payload.receiver_id)
    if not receiver:
        raise NotFound("Receiver not found")

    offered_skill = await session.get(Skill, payload.offered_skill_id)
    if not offered_skill:
        raise NotFound("Offered skill not found")
    requested_skill = await session.get(Skill, payload.requested_skill_id)
    if not requested_skill:
        raise NotFound("Requested skill not found")

    if offered_skill.user_id != sender.id:
        raise ValidationError("offered_skill_id", "The offered skill must be one of your own skills")

    existing = await session.execute(
        select(SwapRequest.id)
        .where(SwapRequest.sender_id == sender.id)
        .where(SwapRequest.receiver_id == payload.receiver_id)
        .where(SwapRequest.status == SwapStatus.PENDING.value)
    )
    if existing.first():
        raise Conflict("You already have a pending request with this user")

    swap = SwapRequest(
        sender_id=sender.id,
        receiver_id=payload.receiver_id,
        offered_skill_id=payload.offered_skill_id,
        requested_skill_id=payload.requested_skill_id,
        status=SwapStatus.PENDING.value,
        message=payload.message,
    )
    session.add(swap)
    await session.commit()
    await session.refresh(swap)
    logger.info("Swap %s proposed by user %s to user %s", swap.id, sender.id, payload.receiver_id)

    await notifications.notify(
        session,
        payload.receiver_id,
        NotificationType.SWAP_REQUEST,
        f"{sender.name} sent you a swap request",
        {"swap_id": swap.id},
    )

    return await get_swap(session, swap.id)


async def transition_status(
    session: AsyncSession, actor: User, swap_id: int, new_status: Union[SwapStatus, str]
) -> SwapRequest:
    try:
        new_status = SwapStatus(new_status)
    except ValueError:
        raise ValidationError("status", "The selected status is invalid.")
    if new_status not in TRANSITION_STATUSES:
        raise ValidationError("status", "The selected status is invalid.")

    swap = await session.get(SwapRequest, swap_id)
    if not swap:
        raise NotFound("Swap request not found")

    if new_status == SwapStatus.COMPLETED:
        if not swap.is_participant(actor.id):
            raise Forbidden("Only swap participants can complete a swap")
    elif swap.receiver_id != actor.id:
        raise Forbidden("Only the receiver can accept or reject a swap request")

    previous_status = swap.status
    swap.status = new_status.value
    swap.updated_at = datetime.utcnow()
    await session.commit()
    logger.info("Swap %s moved from %s to %s by user %s", swap.id, previous_status, swap.status, actor.id)

    await notifications.notify(
        session,
        swap.counterparty_of(actor.id),
        NotificationType(f"swap_{new_status.value}"),
        f"Your swap request was {new_status.value}",
        {"swap_id": swap.id},
    )

    return await get_swap(session, swap.id)


async def list_for_user(
    session: AsyncSession, user_id: int, page: int = 1, items_per_page: int = SWAPS_PER_PAGE
) -> Tuple[List[SwapRequest], int]:
    statement = (
        with_relations(select(SwapRequest))
        .where(or_(SwapRequest.sender_id == user_id, SwapRequest.receiver_id == user_id))
        .order_by(SwapRequest.created_at.desc(), SwapRequest.id.desc())
    )
    return await paginate(session, statement, page, items_per_page)


async def can_rate(session: AsyncSession, user_id: int, swap_id: int) -> bool:
    swap = await session.get(SwapRequest, swap_id)
    if not swap or swap.status != SwapStatus.COMPLETED.value or not swap.is_participant(user_id):
        return False

    existing = await session.execute(
        select(Rating.id).where(Rating.swap_id == swap_id).where(Rating.rater_id == user_id)
    )
    return existing.first() is None
