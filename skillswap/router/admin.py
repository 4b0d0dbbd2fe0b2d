from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import Forbidden, NotFound
from ..db import get_session
from ..models.profile import ProfileRead
from ..models.rating import Rating
from ..models.skill import PaginatedSkillResponse, Skill
from ..models.swaps import PaginatedSwapResponse, SwapRequest, SwapStatus
from ..models.user import User, UserRead
from ..services import cascade
from ..services import swaps as swap_service
from ..utils.auth import get_current_admin
from ..utils.logger import get_logger
from ..utils.pagination import paginate, total_pages

router = APIRouter()
logger = get_logger(__name__)

ADMIN_ITEMS_PER_PAGE = 15


class AdminStats(BaseModel):
    total_users: int
    total_skills: int
    total_swaps: int
    pending_swaps: int
    completed_swaps: int
    total_ratings: int


class AdminUserRead(UserRead):
    profile: Optional[ProfileRead] = None
    skills_count: int
    sent_requests_count: int
    received_requests_count: int


class PaginatedAdminUserResponse(BaseModel):
    items: List[AdminUserRead]
    total_items: int
    page: int
    items_per_page: int
    total_pages: int


async def _count(session: AsyncSession, statement) -> int:
    result = await session.execute(statement)
    return result.scalar_one()


@router.get("/stats", response_model=AdminStats)
async def get_stats(
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    return AdminStats(
        total_users=await _count(session, select(func.count(User.id))),
        total_skills=await _count(session, select(func.count(Skill.id))),
        total_swaps=await _count(session, select(func.count(SwapRequest.id))),
        pending_swaps=await _count(
            session, select(func.count(SwapRequest.id)).where(SwapRequest.status == SwapStatus.PENDING.value)
        ),
        completed_swaps=await _count(
            session, select(func.count(SwapRequest.id)).where(SwapRequest.status == SwapStatus.COMPLETED.value)
        ),
        total_ratings=await _count(session, select(func.count(Rating.id))),
    )


@router.get("/users", response_model=PaginatedAdminUserResponse)
async def list_users(
    page: int = Query(1, ge=1, description="Page number"),
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    statement = select(User).options(selectinload(User.profile)).order_by(User.id)
    users, total_items = await paginate(session, statement, page, ADMIN_ITEMS_PER_PAGE)

    items = []
    for user in users:
        items.append(AdminUserRead(
            **UserRead.model_validate(user).model_dump(),
            profile=ProfileRead.model_validate(user.profile) if user.profile else None,
            skills_count=await _count(session, select(func.count(Skill.id)).where(Skill.user_id == user.id)),
            sent_requests_count=await _count(
                session, select(func.count(SwapRequest.id)).where(SwapRequest.sender_id == user.id)
            ),
            received_requests_count=await _count(
                session, select(func.count(SwapRequest.id)).where(SwapRequest.receiver_id == user.id)
            ),
        ))

    return PaginatedAdminUserResponse(
        items=items,
        total_items=total_items,
        page=page,
        items_per_page=ADMIN_ITEMS_PER_PAGE,
        total_pages=total_pages(total_items, ADMIN_ITEMS_PER_PAGE),
    )


@router.patch("/users/{user_id}/block")
async def toggle_block_user(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    if user.is_admin:
        raise Forbidden("Cannot block admin")

    user.is_blocked = not user.is_blocked
    await session.commit()
    await session.refresh(user)
    logger.info("Admin %s %s user %s", admin.id, "blocked" if user.is_blocked else "unblocked", user.id)

    return {
        "message": "User blocked" if user.is_blocked else "User unblocked",
        "user": UserRead.model_validate(user),
    }


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    user = await session.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    if user.is_admin:
        raise Forbidden("Cannot delete admin")

    await cascade.delete_user(session, user)
    logger.info("Admin %s deleted user %s", admin.id, user_id)
    return {"message": "User deleted"}


@router.get("/skills", response_model=PaginatedSkillResponse)
async def list_skills(
    page: int = Query(1, ge=1, description="Page number"),
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    statement = (
        select(Skill)
        .options(selectinload(Skill.category), selectinload(Skill.user).selectinload(User.profile))
        .order_by(Skill.created_at.desc(), Skill.id.desc())
    )
    skills, total_items = await paginate(session, statement, page, ADMIN_ITEMS_PER_PAGE)
    return PaginatedSkillResponse(
        items=[skill.to_read(with_user=True) for skill in skills],
        total_items=total_items,
        page=page,
        items_per_page=ADMIN_ITEMS_PER_PAGE,
        total_pages=total_pages(total_items, ADMIN_ITEMS_PER_PAGE),
    )


@router.delete("/skills/{skill_id}")
async def delete_skill(
    skill_id: int,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    skill = await session.get(Skill, skill_id)
    if not skill:
        raise NotFound("Skill not found")

    await cascade.delete_skill(session, skill)
    logger.info("Admin %s deleted skill %s", admin.id, skill_id)
    return {"message": "Skill deleted"}


@router.get("/swaps", response_model=PaginatedSwapResponse)
async def list_swaps(
    page: int = Query(1, ge=1, description="Page number"),
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(get_current_admin)
):
    statement = swap_service.with_relations(select(SwapRequest)).order_by(
        SwapRequest.created_at.desc(), SwapRequest.id.desc()
    )
    swaps, total_items = await paginate(session, statement, page, ADMIN_ITEMS_PER_PAGE)
    return PaginatedSwapResponse(
        items=[swap.to_read() for swap in swaps],
        total_items=total_items,
        page=page,
        items_per_page=ADMIN_ITEMS_PER_PAGE,
        total_pages=total_pages(total_items, ADMIN_ITEMS_PER_PAGE),
    )
