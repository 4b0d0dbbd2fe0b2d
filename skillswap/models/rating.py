from pydantic import BaseModel
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime

from .swaps import SwapRead
from .user import UserInfo

if TYPE_CHECKING:
    from .user import User
    from .swaps import SwapRequest


class RatingCreate(BaseModel):
    swap_id: int
    rated_id: int
    rating: int = Field(..., ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=500)


class RatingRead(BaseModel):
    id: int
    swap_id: int
    rater_id: int
    rated_id: int
    rating: int
    review: Optional[str] = None
    created_at: datetime
    rater: Optional[UserInfo] = None
    rated: Optional[UserInfo] = None


class UserRatingsResponse(BaseModel):
    ratings: List[RatingRead]
    avg_rating: float
    total: int


class SwapDetail(SwapRead):
    ratings: List[RatingRead] = []
    can_rate: bool = False


class Rating(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("swap_id", "rater_id", name="uq_rating_swap_rater"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    swap_id: int = Field(foreign_key="swaprequest.id", index=True)
    rater_id: int = Field(foreign_key="user.id")
    rated_id: int = Field(foreign_key="user.id", index=True)
    rating: int
    review: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    rater: "User" = Relationship(sa_relationship_kwargs={"foreign_keys": "Rating.rater_id"})
    rated: "User" = Relationship(sa_relationship_kwargs={"foreign_keys": "Rating.rated_id"})
    swap: "SwapRequest" = Relationship()

    def to_read(self) -> RatingRead:
        loaded = self.__dict__
        return RatingRead(
            id=self.id,
            swap_id=self.swap_id,
            rater_id=self.rater_id,
            rated_id=self.rated_id,
            rating=self.rating,
            review=self.review,
            created_at=self.created_at,
            rater=loaded["rater"].user_info if loaded.get("rater") else None,
            rated=loaded["rated"].user_info if loaded.get("rated") else None,
        )
