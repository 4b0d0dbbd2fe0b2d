from pydantic import BaseModel
from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from enum import Enum
from typing import List, Literal, Optional, TYPE_CHECKING

from .skill import SkillInfo
from .user import UserInfo

if TYPE_CHECKING:
    from .user import User
    from .skill import Skill


class SwapStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COMPLETED = "completed"


class SwapCreate(BaseModel):
    receiver_id: int
    offered_skill_id: int
    requested_skill_id: int
    message: Optional[str] = Field(default=None, max_length=500)


class SwapStatusUpdate(BaseModel):
    status: Literal["accepted", "rejected", "completed"]


class SwapRead(BaseModel):
    id: int
    sender_id: int
    receiver_id: int
    offered_skill_id: int
    requested_skill_id: int
    status: str
    message: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    sender: Optional[UserInfo] = None
    receiver: Optional[UserInfo] = None
    offered_skill: Optional[SkillInfo] = None
    requested_skill: Optional[SkillInfo] = None


class PaginatedSwapResponse(BaseModel):
    items: List[SwapRead]
    total_items: int
    page: int
    items_per_page: int
    total_pages: int


class SwapRequest(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    sender_id: int = Field(foreign_key="user.id", index=True)
    receiver_id: int = Field(foreign_key="user.id", index=True)
    offered_skill_id: int = Field(foreign_key="skill.id")
    requested_skill_id: int = Field(foreign_key="skill.id")
    status: str = Field(default=SwapStatus.PENDING.value, index=True)
    message: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    sender: "User" = Relationship(sa_relationship_kwargs={"foreign_keys": "SwapRequest.sender_id"})
    receiver: "User" = Relationship(sa_relationship_kwargs={"foreign_keys": "SwapRequest.receiver_id"})
    offered_skill: "Skill" = Relationship(sa_relationship_kwargs={"foreign_keys": "SwapRequest.offered_skill_id"})
    requested_skill: "Skill" = Relationship(sa_relationship_kwargs={"foreign_keys": "SwapRequest.requested_skill_id"})

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.sender_id, self.receiver_id)

    def counterparty_of(self, user_id: int) -> int:
        return self.receiver_id if user_id == self.sender_id else self.sender_id

    def to_read(self) -> SwapRead:
        # relations are only expanded when they were eagerly loaded
        loaded = self.__dict__
        return SwapRead(
            id=self.id,
            sender_id=self.sender_id,
            receiver_id=self.receiver_id,
            offered_skill_id=self.offered_skill_id,
            requested_skill_id=self.requested_skill_id,
            status=self.status,
            message=self.message,
            created_at=self.created_at,
            updated_at=self.updated_at,
            sender=loaded["sender"].user_info if loaded.get("sender") else None,
            receiver=loaded["receiver"].user_info if loaded.get("receiver") else None,
            offered_skill=loaded["offered_skill"].skill_info if loaded.get("offered_skill") else None,
            requested_skill=loaded["requested_skill"].skill_info if loaded.get("requested_skill") else None,
        )
