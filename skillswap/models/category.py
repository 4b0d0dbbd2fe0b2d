from pydantic import BaseModel
from sqlmodel import Relationship, SQLModel, Field
from typing import List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .skill import Skill


class CategoryInfo(BaseModel):
    id: int
    name: str
    icon: Optional[str] = None

    class Config:
        from_attributes = True


class Category(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(unique=True)
    icon: Optional[str] = None
    skills: List["Skill"] = Relationship(back_populates="category")
