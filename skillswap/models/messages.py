from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional

from .user import UserInfo


class Message(BaseModel):
    id: str
    sender_id: int
    receiver_id: int
    message: str
    is_read: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)
    sender_is_me: Optional[bool] = None

    @classmethod
    def from_document(cls, document: dict, current_user_id: Optional[int] = None) -> "Message":
        return cls(
            id=str(document["_id"]),
            sender_id=document["sender_id"],
            receiver_id=document["receiver_id"],
            message=document["message"],
            is_read=document.get("is_read", False),
            created_at=document["created_at"],
            sender_is_me=document["sender_id"] == current_user_id if current_user_id is not None else None,
        )


class SendMessageRequest(BaseModel):
    receiver_id: int
    message: str = Field(..., min_length=1, max_length=2000)


class Conversation(BaseModel):
    partner: Optional[UserInfo] = None
    partner_id: int
    last_message: Message
    unread_count: int
