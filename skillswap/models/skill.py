from pydantic import BaseModel
from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional, TYPE_CHECKING
from datetime import datetime
from enum import Enum

from .category import CategoryInfo
from .user import UserInfo

if TYPE_CHECKING:
    from .user import User
    from .category import Category


class SkillType(str, Enum):
    OFFER = "offer"
    REQUEST = "request"


class SkillLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class SkillBase(SQLModel):
    skill_name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    type: SkillType
    level: SkillLevel = SkillLevel.INTERMEDIATE
    category_id: Optional[int] = Field(default=None, foreign_key="category.id")


class SkillCreate(SkillBase):
    pass


class SkillUpdate(SQLModel):
    skill_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    type: Optional[SkillType] = None
    level: Optional[SkillLevel] = None
    category_id: Optional[int] = None


class SkillInfo(BaseModel):
    id: int
    skill_name: str
    type: str
    level: str


class SkillRead(BaseModel):
    id: int
    user_id: int
    skill_name: str
    description: Optional[str] = None
    type: str
    level: str
    category: Optional[CategoryInfo] = None
    user: Optional[UserInfo] = None
    created_at: datetime
    updated_at: datetime


class PaginatedSkillResponse(BaseModel):
    items: List[SkillRead]
    total_items: int
    page: int
    items_per_page: int
    total_pages: int


class Skill(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", index=True)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id")
    skill_name: str = Field(max_length=255, index=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    type: str = Field(index=True)
    level: str = Field(default=SkillLevel.INTERMEDIATE.value)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    user: "User" = Relationship(back_populates="skills")
    category: Optional["Category"] = Relationship(back_populates="skills")

    @property
    def skill_info(self) -> SkillInfo:
        return SkillInfo(id=self.id, skill_name=self.skill_name, type=self.type, level=self.level)

    def to_read(self, with_user: bool = False) -> SkillRead:
        category = self.__dict__.get("category")
        user = self.__dict__.get("user") if with_user else None
        return SkillRead(
            id=self.id,
            user_id=self.user_id,
            skill_name=self.skill_name,
            description=self.description,
            type=self.type,
            level=self.level,
            category=CategoryInfo(id=category.id, name=category.name, icon=category.icon) if category else None,
            user=user.user_info if user else None,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
