"""Relational storage backend on async SQLAlchemy.

Each contract call runs in its own session and commits before returning.
Uniqueness and the rate cascade are enforced by the schema in
``gameratez.db.models``.
"""

from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from gameratez.database import create_engine, create_session_factory
from gameratez.db.base import Base
from gameratez.db.models import (
    Bookmark,
    Comment,
    Follow,
    Like,
    Message,
    Notification,
    Rate,
    Report,
    User,
)
from gameratez.storage.base import Collection, Store
from gameratez.storage.records import Record

logger = structlog.get_logger()

_MODELS: dict[str, type[Base]] = {
    "users": User,
    "rates": Rate,
    "follows": Follow,
    "likes": Like,
    "bookmarks": Bookmark,
    "comments": Comment,
    "notifications": Notification,
    "messages": Message,
    "reports": Report,
}

_CONFLICT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


class SqlStore(Store):
    """Store backed by Postgres (asyncpg) or SQLite (aiosqlite)."""

    backend = "sql"

    def __init__(self, database_url: str, *, create_all: bool = True) -> None:
        self.database_url = database_url
        self.create_all = create_all
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        self._engine = create_engine(self.database_url)
        self._session_factory = create_session_factory(self._engine)
        if self.create_all:
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        logger.info("sql_store_opened", dialect=self._engine.dialect.name, create_all=self.create_all)

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    def _session(self) -> AsyncSession:
        if self._session_factory is None:
            msg = "SqlStore not opened. Call open() first."
            raise RuntimeError(msg)
        return self._session_factory()

    async def ping(self) -> bool:
        try:
            async with self._session() as session:
                await session.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError, RuntimeError) as exc:
            logger.warning("sql_store_ping_failed", error=str(exc))
            return False
        return True

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _where(model: type[Base], filters: dict[str, Any]) -> list[Any]:
        clauses = []
        for field, expected in filters.items():
            column = getattr(model, field)
            if isinstance(expected, (list, tuple, set, frozenset)):
                clauses.append(column.in_(list(expected)))
            else:
                clauses.append(column == expected)
        return clauses

    @staticmethod
    def _order(model: type[Base]) -> list[Any]:
        return [model.created_at, *model.__table__.primary_key.columns]  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def get(self, collection: Collection, **filters: Any) -> list[Any]:
        model = _MODELS[collection.name]
        stmt = select(model).where(*self._where(model, filters)).order_by(*self._order(model))
        async with self._session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [collection.record_type.model_validate(row, from_attributes=True) for row in rows]

    async def count(self, collection: Collection, **filters: Any) -> int:
        model = _MODELS[collection.name]
        stmt = select(func.count()).select_from(model).where(*self._where(model, filters))
        async with self._session() as session:
            return int((await session.execute(stmt)).scalar_one())

    async def insert(self, collection: Collection, record: Record) -> bool:
        model = _MODELS[collection.name]
        values = record.model_dump()
        conflict_insert = _CONFLICT_INSERTS.get(self._engine.dialect.name) if self._engine else None
        async with self._session() as session:
            if conflict_insert is not None:
                stmt = conflict_insert(model).values(**values).on_conflict_do_nothing()
                result = await session.execute(stmt)
                await session.commit()
                return bool(result.rowcount)

            session.add(model(**values))
            try:
                await session.commit()
            except IntegrityError:
                await session.rollback()
                return False
            return True

    async def delete(self, collection: Collection, **filters: Any) -> int:
        model = _MODELS[collection.name]
        stmt = delete(model).where(*self._where(model, filters))
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
        return int(result.rowcount or 0)

    async def update_many(self, collection: Collection, patch: dict[str, Any], **filters: Any) -> int:
        model = _MODELS[collection.name]
        stmt = update(model).where(*self._where(model, filters)).values(**patch)
        async with self._session() as session:
            result = await session.execute(stmt)
            await session.commit()
        return int(result.rowcount or 0)
