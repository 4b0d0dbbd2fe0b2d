from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models.rating import SwapDetail
from ..models.swaps import PaginatedSwapResponse, SwapCreate, SwapRead, SwapStatusUpdate
from ..models.user import User
from ..services import ratings as rating_service
from ..services import swaps as swap_service
from ..utils.auth import get_current_user
from ..utils.pagination import total_pages

router = APIRouter()


@router.get("", response_model=PaginatedSwapResponse)
async def list_my_swaps(
    page: int = Query(1, ge=1, description="Page number"),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    items_per_page = swap_service.SWAPS_PER_PAGE
    swaps, total_items = await swap_service.list_for_user(session, current_user.id, page, items_per_page)
    return PaginatedSwapResponse(
        items=[swap.to_read() for swap in swaps],
        total_items=total_items,
        page=page,
        items_per_page=items_per_page,
        total_pages=total_pages(total_items, items_per_page),
    )


@router.post("", response_model=SwapRead, status_code=status.HTTP_201_CREATED)
async def propose_swap(
    swap: SwapCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    db_swap = await swap_service.propose_swap(session, current_user, swap)
    return db_swap.to_read()


@router.get("/{swap_id}", response_model=SwapDetail)
async def get_swap(
    swap_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    swap = await swap_service.get_swap(session, swap_id)
    swap_ratings = await rating_service.ratings_for_swap(session, swap_id)
    return SwapDetail(
        **swap.to_read().model_dump(),
        ratings=[rating.to_read() for rating in swap_ratings],
        can_rate=await swap_service.can_rate(session, current_user.id, swap_id),
    )


@router.patch("/{swap_id}/status", response_model=SwapRead)
async def update_swap_status(
    swap_id: int,
    data: SwapStatusUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user)
):
    swap = await swap_service.transition_status(session, current_user, swap_id, data.status)
    return swap.to_read()
