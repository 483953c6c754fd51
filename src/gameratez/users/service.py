"""User lookups for public profile views."""

from __future__ import annotations

from gameratez.storage.base import USERS, Store
from gameratez.storage.records import UserRecord


async def get_public_profile(store: Store, username: str) -> UserRecord | None:
    """Find a user by username, case-insensitive. A leading ``@`` is ignored."""
    handle = username.strip().removeprefix("@").strip().lower()
    if not handle:
        return None
    return await store.first(USERS, username_normalized=handle)
