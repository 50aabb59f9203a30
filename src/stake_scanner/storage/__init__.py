"""Persistence backends and the snapshot repository."""

from __future__ import annotations

from stake_scanner.interfaces.store import KeyValueStore
from stake_scanner.models.config import ScannerConfig, StorageBackend
from stake_scanner.storage.rest import RestKeyValueStore
from stake_scanner.storage.snapshot import SnapshotRepository
from stake_scanner.storage.sqlite import SQLiteKeyValueStore


def make_store(cfg: ScannerConfig) -> KeyValueStore:
    """Build the (uninitialized) store selected by ``cfg.storage_backend``."""
    if cfg.storage_backend == StorageBackend.REST:
        if not cfg.kv_url:
            raise ValueError("REST storage backend selected but no kv_url configured")
        return RestKeyValueStore(cfg.kv_url, cfg.kv_token)
    return SQLiteKeyValueStore(cfg.db_path)


__all__ = [
    "make_store",
    "RestKeyValueStore",
    "SnapshotRepository",
    "SQLiteKeyValueStore",
]
