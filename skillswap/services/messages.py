from datetime import datetime
from typing import Dict, List

from pymongo import ASCENDING, DESCENDING
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlmodel import select

from ..core.exceptions import ValidationError
from ..db.mongodb import get_db
from ..models.messages import Conversation, Message, SendMessageRequest
from ..models.notification import NotificationType
from ..models.user import User
from ..utils.logger import get_logger
from . import notifications

logger = get_logger(__name__)


def get_collection():
    return get_db().get_collection("messages")


def _between(user_id: int, partner_id: int) -> dict:
    return {
        "$or": [
            {"sender_id": user_id, "receiver_id": partner_id},
            {"sender_id": partner_id, "receiver_id": user_id},
        ]
    }


async def send_message(session: AsyncSession, sender: User, message_request: SendMessageRequest) -> Message:
    receiver = await session.get(User, message_request.receiver_id)
    if not receiver:
        raise ValidationError("receiver_id", "The selected receiver id is invalid.")

    message_data = {
        "sender_id": sender.id,
        "receiver_id": receiver.id,
        "message": message_request.message,
        "is_read": False,
        "created_at": datetime.utcnow(),
    }
    result = get_collection().insert_one(message_data)
    message_data["_id"] = result.inserted_id
    logger.info("Message %s sent from user %s to user %s", result.inserted_id, sender.id, receiver.id)

    await notifications.notify(
        session,
        receiver.id,
        NotificationType.MESSAGE,
        f"{sender.name} sent you a message",
        {"message_id": str(result.inserted_id)},
    )

    return Message.from_document(message_data, sender.id)


async def get_thread(user_id: int, partner_id: int) -> List[Message]:
    collection = get_collection()
    documents = list(collection.find(_between(user_id, partner_id)).sort("created_at", ASCENDING))

    collection.update_many(
        {"sender_id": partner_id, "receiver_id": user_id, "is_read": False},
        {"$set": {"is_read": True}},
    )

    return [Message.from_document(document, user_id) for document in documents]


async def get_conversations(session: AsyncSession, user_id: int) -> List[Conversation]:
    collection = get_collection()
    documents = collection.find(
        {"$or": [{"sender_id": user_id}, {"receiver_id": user_id}]}
    ).sort("created_at", DESCENDING)

    # newest message first, so the first document seen per partner is the last message
    last_messages: Dict[int, dict] = {}
    for document in documents:
        partner_id = document["receiver_id"] if document["sender_id"] == user_id else document["sender_id"]
        if partner_id not in last_messages:
            last_messages[partner_id] = document

    if not last_messages:
        return []

    partners = await session.execute(
        select(User).options(selectinload(User.profile)).where(User.id.in_(list(last_messages)))
    )
    partners = {partner.id: partner for partner in partners.scalars().all()}

    conversations = []
    for partner_id, document in last_messages.items():
        partner = partners.get(partner_id)
        conversations.append(Conversation(
            partner=partner.user_info if partner else None,
            partner_id=partner_id,
            last_message=Message.from_document(document, user_id),
            unread_count=collection.count_documents(
                {"sender_id": partner_id, "receiver_id": user_id, "is_read": False}
            ),
        ))
    return conversations
