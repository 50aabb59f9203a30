"""KeyValueStore protocol - where scan snapshots are persisted."""

from __future__ import annotations

from typing import Protocol


class PersistenceError(Exception):
    """The backing store rejected a read or write."""


class KeyValueStore(Protocol):
    """Minimal string key-value store. Last write wins."""

    async def initialize(self) -> None:
        """Open connections / create tables."""
        ...

    async def close(self) -> None:
        ...

    async def get(self, key: str) -> str | None:
        """Return the stored value, or None if the key is absent."""
        ...

    async def set(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``. Raises PersistenceError on rejection."""
        ...
