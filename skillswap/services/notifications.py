"""Per-user notification log.

Notifications are written synchronously by the swap engine and by messaging,
always addressed to the counterparty of whoever acted. Only the recipient may
mark them read.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from ..core.exceptions import NotFound
from ..models.notification import Notification, NotificationType
from ..utils.logger import get_logger
from ..utils.pagination import paginate

logger = get_logger(__name__)

NOTIFICATIONS_PER_PAGE = 20


async def notify(
    session: AsyncSession,
    user_id: int,
    type: NotificationType,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> Notification:
    notification = Notification(user_id=user_id, type=type.value, message=message, data=data)
    session.add(notification)
    await session.commit()
    await session.refresh(notification)
    logger.info("Notification %s (%s) sent to user %s", notification.id, notification.type, user_id)
    return notification


async def list_for_user(
    session: AsyncSession, user_id: int, page: int = 1, items_per_page: int = NOTIFICATIONS_PER_PAGE
) -> Tuple[List[Notification], int]:
    statement = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return await paginate(session, statement, page, items_per_page)


async def unread_count(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        select(func.count(Notification.id))
        .where(Notification.user_id == user_id)
        .where(Notification.is_read == False)  # noqa: E712
    )
    return result.scalar_one()


async def mark_read(session: AsyncSession, user_id: int, notification_id: int) -> Notification:
    result = await session.execute(
        select(Notification)
        .where(Notification.id == notification_id)
        .where(Notification.user_id == user_id)
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise NotFound("Notification not found")

    notification.is_read = True
    await session.commit()
    await session.refresh(notification)
    return notification


async def mark_all_read(session: AsyncSession, user_id: int) -> int:
    result = await session.execute(
        update(Notification)
        .where(Notification.user_id == user_id)
        .where(Notification.is_read == False)  # noqa: E712
        .values(is_read=True)
    )
    await session.commit()
    return result.rowcount
