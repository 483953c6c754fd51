"""Integration tests: two-step signup and login."""

from __future__ import annotations

import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.integration


async def _signup(client: AsyncClient, email: str = "alice@example.com", password: str = "hunter2-but-longer"):
    return await client.post("/api/auth/signup", json={"email": email, "password": password})


async def _complete(client: AsyncClient, token: str, username: str = "Alice", **extra):
    payload = {"completeToken": token, "displayName": "Alice A", "username": username, **extra}
    return await client.post("/api/auth/complete", json=payload)


class TestSignup:
    """Step 1: email check and completion token."""

    @pytest.mark.asyncio
    async def test_signup_returns_token_and_normalized_email(self, client: AsyncClient):
        response = await _signup(client, email="  Alice@Example.COM ")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["email"] == "alice@example.com"
        assert len(data["completeToken"]) == 64

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/auth/signup", json={"email": "alice@example.com"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_bad_syntax(self, client: AsyncClient):
        response = await _signup(client, email="not-an-email")
        assert response.status_code == 400
        assert "valid email" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_domain_without_mx(self, client: AsyncClient):
        response = await _signup(client, email="alice@no-mail.test")
        assert response.status_code == 400
        assert "does not accept email" in response.json()["detail"]

    @pytest.mark.asyncio
    async def test_existing_email(self, client: AsyncClient, register):
        await register("alice")
        response = await _signup(client, email="ALICE@example.com")
        assert response.status_code == 409


class TestCompleteSignup:
    """Step 2: profile creation."""

    @pytest.mark.asyncio
    async def test_complete_creates_profile(self, client: AsyncClient):
        token = (await _signup(client)).json()["completeToken"]
        response = await _complete(
            client,
            token,
            username="@Alice",
            favoriteGameKinds=["rpg", 3, "indie"],
            feedPreference="trending",
            platform="PC",
        )
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["username"] == "Alice"
        assert profile["email"] == "alice@example.com"
        assert profile["displayName"] == "Alice A"
        assert profile["favoriteGameKinds"] == ["rpg", "indie"]
        assert profile["feedPreference"] == "trending"
        assert profile["platform"] == "pc"
        assert profile["bio"] == ""
        assert profile["id"].startswith("profile-")
        assert "passwordHash" not in profile

    @pytest.mark.asyncio
    async def test_unknown_preference_defaults_to_all(self, client: AsyncClient):
        token = (await _signup(client)).json()["completeToken"]
        response = await _complete(client, token, feedPreference="everything", platform="switch")
        profile = response.json()["profile"]
        assert profile["feedPreference"] == "all"
        assert profile["platform"] == ""

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient):
        token = (await _signup(client)).json()["completeToken"]
        response = await client.post("/api/auth/complete", json={"completeToken": token, "username": "alice"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_token(self, client: AsyncClient):
        response = await _complete(client, "0" * 64)
        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid or expired session"

    @pytest.mark.asyncio
    async def test_token_is_single_use(self, client: AsyncClient):
        token = (await _signup(client)).json()["completeToken"]
        assert (await _complete(client, token)).status_code == 200
        again = await _complete(client, token, username="alice2")
        assert again.status_code == 400

    @pytest.mark.asyncio
    async def test_expired_token(self, client: AsyncClient, clock):
        token = (await _signup(client)).json()["completeToken"]
        clock.advance(601)
        response = await _complete(client, token)
        assert response.status_code == 400
        assert response.json()["detail"] == "Session expired. Please start again."
        # consumed on expiry
        assert (await _complete(client, token)).json()["detail"] == "Invalid or expired session"

    @pytest.mark.asyncio
    async def test_token_valid_just_before_expiry(self, client: AsyncClient, clock):
        token = (await _signup(client)).json()["completeToken"]
        clock.advance(599)
        assert (await _complete(client, token)).status_code == 200

    @pytest.mark.asyncio
    async def test_taken_username_keeps_token(self, client: AsyncClient, register):
        await register("alice", email="first@example.com")
        token = (await _signup(client, email="second@example.com")).json()["completeToken"]

        taken = await _complete(client, token, username="ALICE")
        assert taken.status_code == 409
        assert taken.json()["detail"] == "Username is already taken"

        retry = await _complete(client, token, username="alice_two")
        assert retry.status_code == 200
        assert retry.json()["profile"]["email"] == "second@example.com"

    @pytest.mark.asyncio
    async def test_email_completed_by_another_token(self, client: AsyncClient):
        first = (await _signup(client)).json()["completeToken"]
        second = (await _signup(client)).json()["completeToken"]
        assert (await _complete(client, first)).status_code == 200
        response = await _complete(client, second, username="other")
        assert response.status_code == 409
        assert response.json()["detail"] == "Account already completed"


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success(self, client: AsyncClient, register):
        await register("alice", password="correct horse battery")
        response = await client.post(
            "/api/auth/login",
            json={"email": " Alice@example.com", "password": "correct horse battery"},
        )
        assert response.status_code == 200
        assert response.json()["profile"]["username"] == "alice"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client: AsyncClient, register):
        await register("alice")
        response = await client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    @pytest.mark.asyncio
    async def test_unknown_email(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_missing_fields(self, client: AsyncClient):
        response = await client.post("/api/auth/login", json={"email": "alice@example.com"})
        assert response.status_code == 400
