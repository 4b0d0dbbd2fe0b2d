from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models.rating import RatingCreate, RatingRead, UserRatingsResponse
from ..models.user import User
from ..services import ratings as rating_service
from ..utils.auth import get_current_user

router = APIRouter()


@router.post("", response_model=RatingRead, status_code=status.HTTP_201_CREATED)
async def create_rating(
    rating: RatingCreate,
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    new_rating = await rating_service.submit_rating(session, current_user, rating)
    return new_rating.to_read()


@router.get("/{user_id}", response_model=UserRatingsResponse)
async def get_user_ratings(user_id: int, session: AsyncSession = Depends(get_session)):
    ratings, avg_rating, total = await rating_service.ratings_for_user(session, user_id)
    return UserRatingsResponse(
        ratings=[rating.to_read() for rating in ratings],
        avg_rating=avg_rating,
        total=total,
    )
