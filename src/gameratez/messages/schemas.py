"""Schemas for direct messages."""

from __future__ import annotations

from datetime import datetime

from gameratez.schemas import CamelModel


class SendMessageRequest(CamelModel):
    sender_username: str | None = None
    receiver_username: str | None = None
    body: str | None = None


class MessageResponse(CamelModel):
    id: str
    sender_username: str
    receiver_username: str
    body: str
    created_at: datetime


class LastMessage(CamelModel):
    body: str
    created_at: datetime
    from_me: bool


class ConversationResponse(CamelModel):
    other_username: str
    last_message: LastMessage
    last_message_at: datetime
