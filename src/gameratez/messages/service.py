"""Direct messages between two users."""

from __future__ import annotations

from datetime import datetime
from typing import Any

import structlog

from gameratez.errors import ValidationError
from gameratez.storage.base import MESSAGES, Store
from gameratez.storage.records import MessageRecord, new_id

logger = structlog.get_logger()


def _clean(value: str | None) -> str:
    return (value or "").strip().lower()


async def send_message(
    store: Store,
    sender: str | None,
    receiver: str | None,
    body: str | None,
    now: datetime,
) -> MessageRecord:
    s, r = _clean(sender), _clean(receiver)
    text = (body or "").strip()
    if not s or not r:
        raise ValidationError("senderUsername and receiverUsername required")
    if not text:
        raise ValidationError("body required")
    if s == r:
        raise ValidationError("Cannot message yourself")

    message = MessageRecord(
        id=new_id("msg"),
        sender_username=s,
        receiver_username=r,
        body=text,
        created_at=now,
    )
    await store.insert(MESSAGES, message)
    logger.debug("message_sent", sender=s, receiver=r)
    return message


async def _involving(store: Store, username: str) -> list[MessageRecord]:
    sent = await store.get(MESSAGES, sender_username=username)
    received = await store.get(MESSAGES, receiver_username=username)
    return sent + received


async def get_thread(store: Store, username: str | None, other: str | None) -> list[MessageRecord]:
    """Messages between two users, oldest first."""
    u, w = _clean(username), _clean(other)
    if not u or not w:
        raise ValidationError("username and with required")
    thread = [
        m
        for m in await store.get(MESSAGES, sender_username=[u, w], receiver_username=[u, w])
        if {m.sender_username, m.receiver_username} == {u, w}
    ]
    thread.sort(key=lambda m: m.created_at)
    return thread


async def list_conversations(store: Store, username: str | None) -> list[dict[str, Any]]:
    """One entry per other participant with the latest message, most recent conversation first."""
    u = _clean(username)
    if not u:
        raise ValidationError("username required")

    latest: dict[str, MessageRecord] = {}
    for message in await _involving(store, u):
        other = message.receiver_username if message.sender_username == u else message.sender_username
        if not other:
            continue
        current = latest.get(other)
        if current is None or message.created_at > current.created_at:
            latest[other] = message

    conversations = [
        {
            "other_username": other,
            "last_message": {
                "body": m.body,
                "created_at": m.created_at,
                "from_me": m.sender_username == u,
            },
            "last_message_at": m.created_at,
        }
        for other, m in latest.items()
    ]
    conversations.sort(key=lambda c: c["last_message_at"], reverse=True)
    return conversations
