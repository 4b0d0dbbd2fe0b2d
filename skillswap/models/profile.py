from pydantic import BaseModel
from sqlalchemy import JSON, Column
from sqlmodel import SQLModel, Field, Relationship
from typing import Dict, List, Optional, TYPE_CHECKING
from datetime import datetime

from .user import UserRead
from .skill import SkillRead

if TYPE_CHECKING:
    from .user import User


class ProfileRead(BaseModel):
    user_id: int
    bio: Optional[str] = None
    location: Optional[str] = None
    photo: Optional[Dict[str, str]] = None
    reputation_score: float

    class Config:
        from_attributes = True


class ProfileDetail(BaseModel):
    profile: ProfileRead
    user: UserRead
    avg_rating: float
    total_swaps: int
    skills_offered: List[SkillRead]
    skills_wanted: List[SkillRead]


class MeRead(UserRead):
    profile: Optional[ProfileRead] = None


class Profile(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", unique=True, index=True)
    bio: Optional[str] = Field(default=None, max_length=1000)
    location: Optional[str] = Field(default=None, max_length=255)
    photo: Optional[Dict[str, str]] = Field(sa_column=Column(JSON), default=None)
    reputation_score: float = Field(default=0.0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    user: "User" = Relationship(back_populates="profile")
