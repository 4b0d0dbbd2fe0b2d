from typing import List

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..db import get_session
from ..models.messages import Conversation, Message, SendMessageRequest
from ..models.user import User
from ..services import messages as message_service
from ..utils.auth import get_current_user

router = APIRouter()


@router.get("/conversations", response_model=List[Conversation])
async def get_conversations(
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await message_service.get_conversations(session, current_user.id)


@router.get("/{partner_id}", response_model=List[Message])
async def get_messages(
    partner_id: int,
    current_user: User = Depends(get_current_user)
):
    return await message_service.get_thread(current_user.id, partner_id)


@router.post("", response_model=Message, status_code=status.HTTP_201_CREATED)
async def send_message(
    message_request: SendMessageRequest = Body(...),
    current_user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session)
):
    return await message_service.send_message(session, current_user, message_request)
