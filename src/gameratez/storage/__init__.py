"""Persistence adapter: one ``Store`` contract, file and SQL backends."""

from gameratez.storage.base import (
    BOOKMARKS,
    COLLECTIONS,
    COMMENTS,
    FOLLOWS,
    LIKES,
    MESSAGES,
    NOTIFICATIONS,
    RATES,
    REPORTS,
    USERS,
    Collection,
    Store,
)
from gameratez.storage.factory import create_store
from gameratez.storage.file_store import FileStore
from gameratez.storage.sql_store import SqlStore

__all__ = [
    "BOOKMARKS",
    "COLLECTIONS",
    "COMMENTS",
    "FOLLOWS",
    "LIKES",
    "MESSAGES",
    "NOTIFICATIONS",
    "RATES",
    "REPORTS",
    "USERS",
    "Collection",
    "FileStore",
    "SqlStore",
    "Store",
    "create_store",
]
