"""SQLite implementation of the KeyValueStore protocol."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from stake_scanner.interfaces.store import PersistenceError

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (datetime('now'))
);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteKeyValueStore:
    """SQLite-backed implementation of the KeyValueStore protocol."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None

    async def initialize(self) -> None:
        """Open the database and create the table.

        Raises PersistenceError when the file cannot be created or opened.
        """
        try:
            if self._db_path != ":memory:":
                Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
            self._db = await aiosqlite.connect(self._db_path)
            self._db.row_factory = aiosqlite.Row
            await self._db.executescript(SCHEMA)
            await self._db.commit()
        except (OSError, aiosqlite.Error) as exc:
            await self.close()
            raise PersistenceError(f"cannot open {self._db_path}: {exc}") from exc

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    async def get(self, key: str) -> str | None:
        try:
            async with self.db.execute("SELECT value FROM kv WHERE key=?", (key,)) as cur:
                row = await cur.fetchone()
        except aiosqlite.Error as exc:
            raise PersistenceError(f"read of {key!r} failed: {exc}") from exc
        return row["value"] if row else None

    async def set(self, key: str, value: str) -> None:
        try:
            await self.db.execute(
                "INSERT INTO kv (key, value, updated_at) VALUES (?, ?, ?)"
                " ON CONFLICT(key) DO UPDATE SET value=excluded.value,"
                " updated_at=excluded.updated_at",
                (key, value, _now()),
            )
            await self.db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(f"write of {key!r} failed: {exc}") from exc
