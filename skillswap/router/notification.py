from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models.notification import NotificationRead, PaginatedNotificationResponse
from ..models.user import User
from ..services import notifications as notification_service
from ..utils.auth import get_current_user
from ..utils.pagination import total_pages

router = APIRouter()


@router.get("", response_model=PaginatedNotificationResponse)
async def list_notifications(
    page: int = Query(1, ge=1, description="Page number"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    items_per_page = notification_service.NOTIFICATIONS_PER_PAGE
    items, total_items = await notification_service.list_for_user(session, current_user.id, page, items_per_page)
    return PaginatedNotificationResponse(
        items=[NotificationRead.model_validate(item) for item in items],
        total_items=total_items,
        page=page,
        items_per_page=items_per_page,
        total_pages=total_pages(total_items, items_per_page),
    )


@router.get("/unread-count")
async def unread_count(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    return {"count": await notification_service.unread_count(session, current_user.id)}


@router.patch("/read-all")
async def mark_all_read(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    updated = await notification_service.mark_all_read(session, current_user.id)
    return {"message": "All notifications marked as read", "updated": updated}


@router.patch("/{notification_id}/read")
async def mark_read(
    notification_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    await notification_service.mark_read(session, current_user.id, notification_id)
    return {"message": "Notification marked as read"}
