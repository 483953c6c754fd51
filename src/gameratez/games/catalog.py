"""Closed list of game names that rates may refer to.

Loaded from a JSON array of strings (see ``scripts/seed_games_from_rawg.py``).
With no catalog configured every non-blank name is accepted as typed.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

import structlog

logger = structlog.get_logger()


class GameCatalog:
    def __init__(self, names: Iterable[str] | None = None) -> None:
        self._by_key: dict[str, str] | None = None
        if names is not None:
            self._by_key = {}
            for name in names:
                cleaned = name.strip() if isinstance(name, str) else ""
                if cleaned:
                    self._by_key.setdefault(cleaned.lower(), cleaned)

    @classmethod
    def from_file(cls, path: str | Path | None) -> GameCatalog:
        """Load a catalog from ``path``. An empty path means no catalog."""
        if not path:
            return cls()
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, list):
            msg = f"Game catalog {path} must be a JSON array of names"
            raise ValueError(msg)
        catalog = cls(raw)
        logger.info("game_catalog_loaded", path=str(path), games=len(catalog))
        return catalog

    def __len__(self) -> int:
        return len(self._by_key or {})

    def canonical(self, name: str) -> str | None:
        """Catalog casing for ``name``, or None when it is not in the catalog.

        Without a catalog the trimmed input is returned unchanged.
        """
        cleaned = name.strip()
        if not cleaned:
            return None
        if self._by_key is None:
            return cleaned
        return self._by_key.get(cleaned.lower())
