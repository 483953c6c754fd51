"""Integration tests: notification inbox endpoints."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


class TestNotificationsAPI:
    """Integration: notification list, unread count and read marking."""

    @pytest.mark.asyncio
    async def test_empty_inbox(self, client: AsyncClient):
        assert (await client.get("/api/notifications", params={"username": "alice"})).json() == []
        count = await client.get("/api/notifications/unread-count", params={"username": "alice"})
        assert count.json() == {"count": 0}

    @pytest.mark.asyncio
    async def test_username_required(self, client: AsyncClient):
        assert (await client.get("/api/notifications")).status_code == 400
        assert (await client.get("/api/notifications/unread-count")).status_code == 400
        assert (await client.patch("/api/notifications/read-all", json={})).status_code == 400

    @pytest.mark.asyncio
    async def test_events_land_in_author_inbox(self, client: AsyncClient, post_rate, clock):
        rate = await post_rate("alice", "Hades")
        clock.advance()
        await client.post(f"/api/rates/{rate['id']}/like", json={"username": "bob"})
        clock.advance()
        await client.post(
            f"/api/rates/{rate['id']}/comments",
            json={"username": "carol", "displayName": "Carol", "body": "Nice take"},
        )
        clock.advance()
        await client.post("/api/follow", json={"followerUsername": "dave", "followeeUsername": "alice"})

        inbox = (await client.get("/api/notifications", params={"username": "Alice"})).json()
        assert [n["type"] for n in inbox] == ["follow", "comment", "like"]
        follow, comment, like = inbox
        assert follow["actorUsername"] == "dave"
        assert follow["rateId"] is None
        assert comment["body"] == "Nice take"
        assert comment["actorDisplayName"] == "Carol"
        assert like["gameName"] == "Hades"
        assert all(n["read"] is False for n in inbox)

    @pytest.mark.asyncio
    async def test_mark_read(self, client: AsyncClient):
        await client.post("/api/follow", json={"followerUsername": "bob", "followeeUsername": "alice"})
        [notification] = (await client.get("/api/notifications", params={"username": "alice"})).json()

        response = await client.patch(f"/api/notifications/{notification['id']}/read")
        assert response.status_code == 200
        assert response.json() == {"success": True}
        count = await client.get("/api/notifications/unread-count", params={"username": "alice"})
        assert count.json()["count"] == 0

        assert (await client.patch("/api/notifications/notif-missing/read")).status_code == 404

    @pytest.mark.asyncio
    async def test_mark_all_read(self, client: AsyncClient, clock):
        for follower in ("bob", "carol", "dave"):
            await client.post("/api/follow", json={"followerUsername": follower, "followeeUsername": "alice"})
            clock.advance()

        response = await client.patch("/api/notifications/read-all", json={"username": "alice"})
        assert response.json() == {"success": True, "marked": 3}
        again = await client.patch("/api/notifications/read-all", json={"username": "alice"})
        assert again.json()["marked"] == 0
