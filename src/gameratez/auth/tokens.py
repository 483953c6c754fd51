"""In-memory store for signup completion tokens.

A token bridges the two signup steps: it carries the checked email and the
password hash from ``/signup`` to ``/complete``. Tokens live only in process
memory, so a restart invalidates every signup in flight.
"""

from __future__ import annotations

import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from gameratez.storage.records import utcnow


@dataclass(frozen=True)
class PendingSignup:
    email: str
    password_hash: str
    expires_at: datetime


class CompleteTokenStore:
    """Token -> PendingSignup with a fixed TTL, checked on read and swept on issue."""

    def __init__(self, ttl_seconds: int = 600, clock: Callable[[], datetime] = utcnow) -> None:
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: dict[str, PendingSignup] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def issue(self, email: str, password_hash: str) -> str:
        """Create a token for a checked email and password hash."""
        self.sweep()
        token = secrets.token_hex(32)
        self._entries[token] = PendingSignup(
            email=email,
            password_hash=password_hash,
            expires_at=self._clock() + self.ttl,
        )
        return token

    def get(self, token: str) -> PendingSignup | None:
        """The pending signup for ``token``, expired or not. None if unknown."""
        return self._entries.get(token)

    def is_expired(self, entry: PendingSignup) -> bool:
        return self._clock() > entry.expires_at

    def consume(self, token: str) -> None:
        self._entries.pop(token, None)

    def sweep(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        expired = [token for token, entry in self._entries.items() if now > entry.expires_at]
        for token in expired:
            del self._entries[token]
        return len(expired)
