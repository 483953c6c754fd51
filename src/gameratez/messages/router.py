"""Direct message endpoints: /api/messages/*."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from gameratez.dependencies import get_now, get_store
from gameratez.messages import service
from gameratez.messages.schemas import ConversationResponse, MessageResponse, SendMessageRequest
from gameratez.storage.base import Store

router = APIRouter(prefix="/api/messages", tags=["Messages"])


@router.get("/conversations", response_model=list[ConversationResponse])
async def conversations(
    username: str | None = Query(None),
    store: Store = Depends(get_store),
):
    """Conversation list with the latest message per participant."""
    return await service.list_conversations(store, username)


@router.get("", response_model=list[MessageResponse])
async def thread(
    username: str | None = Query(None),
    with_user: str | None = Query(None, alias="with"),
    store: Store = Depends(get_store),
):
    """Messages between ``username`` and ``with``, oldest first."""
    return await service.get_thread(store, username, with_user)


@router.post("", response_model=MessageResponse, status_code=201)
async def send(
    body: SendMessageRequest,
    store: Store = Depends(get_store),
    now: datetime = Depends(get_now),
):
    return await service.send_message(store, body.sender_username, body.receiver_username, body.body, now)
