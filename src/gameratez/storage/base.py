"""Storage contract shared by the JSON-file and SQL backends.

Services only ever talk to a ``Store``; which backend sits behind it is
decided once at startup (see ``gameratez.storage.factory``).

Filters are keyword arguments matched by field equality. A list, tuple or
set value matches any of its members::

    await store.get(LIKES, rate_id=["rate-1", "rate-2"])
    await store.delete(FOLLOWS, follower_username="alice", followee_username="bob")
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from gameratez.storage.records import (
    BookmarkRecord,
    CommentRecord,
    FollowRecord,
    LikeRecord,
    MessageRecord,
    NotificationRecord,
    RateRecord,
    Record,
    ReportRecord,
    UserRecord,
)


@dataclass(frozen=True)
class Collection:
    """A named collection, its record type and the field tuples that must be unique."""

    name: str
    record_type: type[Record]
    unique: tuple[tuple[str, ...], ...]

    @property
    def id_field(self) -> str:
        return self.unique[0][0]


USERS = Collection("users", UserRecord, (("id",), ("email",), ("username_normalized",)))
RATES = Collection("rates", RateRecord, (("id",),))
FOLLOWS = Collection("follows", FollowRecord, (("follower_username", "followee_username"),))
LIKES = Collection("likes", LikeRecord, (("rate_id", "username"),))
BOOKMARKS = Collection("bookmarks", BookmarkRecord, (("rate_id", "username"),))
COMMENTS = Collection("comments", CommentRecord, (("id",),))
NOTIFICATIONS = Collection("notifications", NotificationRecord, (("id",),))
MESSAGES = Collection("messages", MessageRecord, (("id",),))
REPORTS = Collection("reports", ReportRecord, (("id",),))

COLLECTIONS: tuple[Collection, ...] = (
    USERS,
    RATES,
    FOLLOWS,
    LIKES,
    BOOKMARKS,
    COMMENTS,
    NOTIFICATIONS,
    MESSAGES,
    REPORTS,
)


def matches(record: Record, filters: dict[str, Any]) -> bool:
    """Evaluate equality / membership filters against a record."""
    for field, expected in filters.items():
        value = getattr(record, field)
        if isinstance(expected, (list, tuple, set, frozenset)):
            if value not in expected:
                return False
        elif value != expected:
            return False
    return True


class Store(ABC):
    """CRUD over the nine collections. Records go in and come out as pydantic models."""

    backend: str

    async def open(self) -> None:  # noqa: B027
        """Load or connect. Called once from the app lifespan."""

    async def close(self) -> None:  # noqa: B027
        """Flush and release resources."""

    @abstractmethod
    async def ping(self) -> bool:
        """Readiness check."""

    @abstractmethod
    async def get(self, collection: Collection, **filters: Any) -> list[Any]:
        """Return matching records in storage order. Callers sort."""

    @abstractmethod
    async def count(self, collection: Collection, **filters: Any) -> int:
        """Count matching records."""

    @abstractmethod
    async def insert(self, collection: Collection, record: Record) -> bool:
        """Insert a record. Returns False, writing nothing, on a uniqueness conflict."""

    @abstractmethod
    async def delete(self, collection: Collection, **filters: Any) -> int:
        """Delete matching records. Returns the number removed."""

    @abstractmethod
    async def update_many(self, collection: Collection, patch: dict[str, Any], **filters: Any) -> int:
        """Apply ``patch`` to every matching record. Returns the number changed."""

    async def update(self, collection: Collection, record_id: str, patch: dict[str, Any]) -> bool:
        """Patch one record by id. Returns False if no such record exists."""
        return await self.update_many(collection, patch, **{collection.id_field: record_id}) > 0

    async def first(self, collection: Collection, **filters: Any) -> Any | None:
        """First matching record, or None."""
        found = await self.get(collection, **filters)
        return found[0] if found else None
