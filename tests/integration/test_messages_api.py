"""Integration tests: direct messages."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def _send(client: AsyncClient, sender: str, receiver: str, body: str):
    return await client.post(
        "/api/messages",
        json={"senderUsername": sender, "receiverUsername": receiver, "body": body},
    )


class TestMessagesAPI:
    @pytest.mark.asyncio
    async def test_send(self, client: AsyncClient):
        response = await _send(client, "Alice", "Bob", "  hey  ")
        assert response.status_code == 201
        data = response.json()
        assert data["id"].startswith("msg-")
        assert data["senderUsername"] == "alice"
        assert data["receiverUsername"] == "bob"
        assert data["body"] == "hey"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("sender", "receiver", "body"),
        [("alice", "", "hi"), ("", "bob", "hi"), ("alice", "bob", "   "), ("alice", "ALICE", "hi")],
    )
    async def test_invalid(self, client: AsyncClient, sender, receiver, body):
        assert (await _send(client, sender, receiver, body)).status_code == 400

    @pytest.mark.asyncio
    async def test_thread_oldest_first(self, client: AsyncClient, clock):
        await _send(client, "alice", "bob", "one")
        clock.advance()
        await _send(client, "bob", "alice", "two")
        clock.advance()
        await _send(client, "alice", "carol", "elsewhere")
        clock.advance()
        await _send(client, "alice", "bob", "three")

        thread = await client.get("/api/messages", params={"username": "BOB", "with": "alice"})
        assert [m["body"] for m in thread.json()] == ["one", "two", "three"]

        assert (await client.get("/api/messages", params={"username": "bob"})).status_code == 400

    @pytest.mark.asyncio
    async def test_conversations(self, client: AsyncClient, clock):
        await _send(client, "alice", "bob", "hi bob")
        clock.advance()
        await _send(client, "carol", "alice", "hi alice")
        clock.advance()
        await _send(client, "bob", "alice", "hey back")

        response = await client.get("/api/messages/conversations", params={"username": "alice"})
        assert response.status_code == 200
        conversations = response.json()
        assert [c["otherUsername"] for c in conversations] == ["bob", "carol"]
        bob, carol = conversations
        assert bob["lastMessage"]["body"] == "hey back"
        assert bob["lastMessage"]["fromMe"] is False
        assert carol["lastMessage"]["fromMe"] is False
        assert bob["lastMessageAt"] > carol["lastMessageAt"]

        mine = (await client.get("/api/messages/conversations", params={"username": "carol"})).json()
        assert mine[0]["lastMessage"]["fromMe"] is True

    @pytest.mark.asyncio
    async def test_conversations_require_username(self, client: AsyncClient):
        assert (await client.get("/api/messages/conversations")).status_code == 400
