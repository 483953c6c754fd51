#!/usr/bin/env python3
"""Build the game catalog from the RAWG API.

Fetches popular games under several orderings, de-duplicates names and
writes a sorted JSON array suitable for GAMERATEZ_GAMES_FILE.
Get a free API key at https://rawg.io/login/?forward=developer

Usage: RAWG_API_KEY=your_key python3 scripts/seed_games_from_rawg.py [out_path] [max_pages]
"""

import json
import os
import sys
from pathlib import Path

import httpx

API_URL = "https://api.rawg.io/api/games"
PAGE_SIZE = 40
ORDERINGS = ("-rating", "-released", "-metacritic")

OUT_PATH = Path(sys.argv[1]) if len(sys.argv) > 1 else Path("data/games.json")
MAX_PAGES = int(sys.argv[2]) if len(sys.argv) > 2 else 80  # 80 * 40 = 3200 games per ordering


def fetch_page(client: httpx.Client, key: str, page: int, ordering: str) -> list[dict]:
    response = client.get(
        API_URL,
        params={"key": key, "page_size": PAGE_SIZE, "page": page, "ordering": ordering},
        timeout=20.0,
    )
    response.raise_for_status()
    return response.json().get("results") or []


def collect_names(client: httpx.Client, key: str) -> list[str]:
    seen: set[str] = set()
    names: list[str] = []
    for ordering in ORDERINGS:
        for page in range(1, MAX_PAGES + 1):
            results = fetch_page(client, key, page, ordering)
            for game in results:
                name = (game.get("name") or "").strip()
                if name and name not in seen:
                    seen.add(name)
                    names.append(name)
            print(f"\rFetched {len(names)} games ({ordering}, page {page})   ", end="", flush=True)
            if len(results) < PAGE_SIZE:
                break
    return names


def main() -> int:
    key = os.environ.get("RAWG_API_KEY", "")
    if not key:
        print("Set RAWG_API_KEY. Get a free key at https://rawg.io/login/?forward=developer", file=sys.stderr)
        return 1

    with httpx.Client() as client:
        try:
            names = collect_names(client, key)
        except httpx.HTTPError as exc:
            print(f"\nRAWG request failed: {exc}", file=sys.stderr)
            return 1

    names.sort(key=str.casefold)
    OUT_PATH.parent.mkdir(parents=True, exist_ok=True)
    OUT_PATH.write_text(json.dumps(names, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"\nWrote {len(names)} games to {OUT_PATH}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
