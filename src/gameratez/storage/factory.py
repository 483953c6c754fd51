"""Pick the storage backend from settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

from gameratez.storage.file_store import FileStore
from gameratez.storage.sql_store import SqlStore

if TYPE_CHECKING:
    from gameratez.config import Settings
    from gameratez.storage.base import Store


def create_store(settings: Settings) -> Store:
    """SqlStore when a database URL is configured, FileStore otherwise."""
    if settings.storage_backend == "sql":
        return SqlStore(settings.database_url, create_all=settings.db_create_all)
    return FileStore(settings.data_dir)
