from __future__ import annotations

import json
import logging
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CacheKey:
    kind: str  # "lyric" | "color"
    artist_id: str
    track_id: str = ""


class PayloadCache:
    """Raw lyric/color payloads as fetched, keyed per artist (and track)."""

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self.db_path)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with self._connect() as con:
            con.execute(
                """
                CREATE TABLE IF NOT EXISTS payload_cache (
                    kind      TEXT NOT NULL,
                    artist_id TEXT NOT NULL,
                    track_id  TEXT NOT NULL DEFAULT '',
                    source    TEXT,
                    payload   TEXT NOT NULL,
                    updated_at INTEGER NOT NULL,
                    PRIMARY KEY (kind, artist_id, track_id)
                );
                """
            )
            con.execute(
                "CREATE INDEX IF NOT EXISTS idx_payload_cache_updated_at ON payload_cache(updated_at);"
            )

    def get(self, key: CacheKey) -> Any | None:
        """
        Returns the decoded payload, or None if there is no usable entry.
        """
        with self._connect() as con:
            row = con.execute(
                "SELECT payload FROM payload_cache WHERE kind=? AND artist_id=? AND track_id=?",
                (key.kind, key.artist_id, key.track_id),
            ).fetchone()
        if row is None:
            return None
        try:
            return json.loads(row["payload"])
        except json.JSONDecodeError:
            logger.warning("Corrupt cache entry for %s, ignoring", key)
            return None

    def set(self, key: CacheKey, payload: Any, *, source: str | None) -> None:
        now = int(time.time())
        with self._connect() as con:
            con.execute(
                """
                INSERT INTO payload_cache(kind, artist_id, track_id, source, payload, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(kind, artist_id, track_id) DO UPDATE SET
                    source=excluded.source,
                    payload=excluded.payload,
                    updated_at=excluded.updated_at
                """,
                (key.kind, key.artist_id, key.track_id, source, json.dumps(payload, ensure_ascii=False), now),
            )

    def clear(self) -> None:
        with self._connect() as con:
            con.execute("DELETE FROM payload_cache")
