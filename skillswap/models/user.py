from pydantic import BaseModel, EmailStr
from sqlmodel import SQLModel, Field, Relationship
from typing import Dict, Optional, List
from datetime import datetime
from enum import Enum

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .profile import Profile
    from .skill import Skill


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserInfo(BaseModel):
    id: int
    name: str
    email: Optional[str] = None
    photo: Optional[Dict[str, str]] = None
    reputation_score: float = 0.0


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    role: str
    is_blocked: bool
    is_verified: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UserLoginInput(BaseModel):
    username: EmailStr
    password: str


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    role: str = Field(default=UserRole.USER.value)
    is_blocked: bool = Field(default=False)
    is_verified: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    profile: Optional["Profile"] = Relationship(
        back_populates="user", sa_relationship_kwargs={"uselist": False}
    )
    skills: List["Skill"] = Relationship(back_populates="user")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def user_info(self) -> UserInfo:
        # profile must already be loaded, lazy loads are not available on AsyncSession
        profile = self.__dict__.get("profile")
        return UserInfo(
            id=self.id,
            name=self.name,
            email=self.email,
            photo=profile.photo if profile else None,
            reputation_score=profile.reputation_score if profile else 0.0,
        )
