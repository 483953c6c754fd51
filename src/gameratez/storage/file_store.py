"""JSON-file storage backend.

Each collection lives in memory as a list of records and is mirrored to
``<data_dir>/<collection>.json``. Every mutation rewrites that collection's
file in full before returning, serialized by a single lock so writes land
in mutation order. A failed write is logged and swallowed: the in-memory
state stays authoritative for the life of the process, and a crash between
the mutation and the write loses that mutation.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import structlog

from gameratez.storage.base import COLLECTIONS, Collection, Store, matches
from gameratez.storage.records import Record

logger = structlog.get_logger()


class FileStore(Store):
    """In-process collections with write-after-every-mutation persistence."""

    backend = "file"

    def __init__(self, data_dir: str | Path) -> None:
        self.data_dir = Path(data_dir)
        self._data: dict[str, list[Record]] = {c.name: [] for c in COLLECTIONS}
        self._write_lock = asyncio.Lock()

    def _path(self, collection: Collection) -> Path:
        return self.data_dir / f"{collection.name}.json"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        for collection in COLLECTIONS:
            self._data[collection.name] = await asyncio.to_thread(self._load, collection)
        logger.info(
            "file_store_opened",
            data_dir=str(self.data_dir),
            counts={name: len(rows) for name, rows in self._data.items()},
        )

    def _load(self, collection: Collection) -> list[Record]:
        path = self._path(collection)
        if not path.exists():
            return []
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("file_store_load_failed", collection=collection.name, error=str(exc))
            return []
        if not isinstance(raw, list):
            logger.warning("file_store_load_failed", collection=collection.name, error="not a JSON array")
            return []

        records: list[Record] = []
        for item in raw:
            try:
                records.append(collection.record_type.model_validate(item))
            except ValueError:
                logger.warning("file_store_record_skipped", collection=collection.name, item=item)
        return records

    async def _save(self, collection: Collection) -> None:
        async with self._write_lock:
            # Snapshot under the lock so a later write never lands an older state.
            payload = [r.model_dump(mode="json") for r in self._data[collection.name]]
            try:
                await asyncio.to_thread(self._write, self._path(collection), payload)
            except OSError as exc:
                logger.error("file_store_write_failed", collection=collection.name, error=str(exc))

    def _write(self, path: Path, payload: list[dict[str, Any]]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp.replace(path)

    async def ping(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    async def get(self, collection: Collection, **filters: Any) -> list[Any]:
        rows = self._data[collection.name]
        if not filters:
            return list(rows)
        return [r for r in rows if matches(r, filters)]

    async def count(self, collection: Collection, **filters: Any) -> int:
        return sum(1 for r in self._data[collection.name] if matches(r, filters))

    async def insert(self, collection: Collection, record: Record) -> bool:
        rows = self._data[collection.name]
        # Check and append with no await in between.
        for key in collection.unique:
            wanted = {field: getattr(record, field) for field in key}
            if any(matches(r, wanted) for r in rows):
                return False
        rows.append(record)
        await self._save(collection)
        return True

    async def delete(self, collection: Collection, **filters: Any) -> int:
        rows = self._data[collection.name]
        kept = [r for r in rows if not matches(r, filters)]
        removed = len(rows) - len(kept)
        if removed:
            self._data[collection.name] = kept
            await self._save(collection)
        return removed

    async def update_many(self, collection: Collection, patch: dict[str, Any], **filters: Any) -> int:
        rows = self._data[collection.name]
        changed = 0
        for i, record in enumerate(rows):
            if matches(record, filters):
                rows[i] = record.model_copy(update=patch)
                changed += 1
        if changed:
            await self._save(collection)
        return changed
