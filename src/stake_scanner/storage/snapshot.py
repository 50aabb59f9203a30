"""Snapshot repository - serializes scan results into the key-value store."""

from __future__ import annotations

import json
import logging
import time
from typing import Sequence

from stake_scanner.interfaces.store import KeyValueStore
from stake_scanner.models.snapshots import ScanResult

log = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class SnapshotRepository:
    """Reads and writes the latest scan snapshot and the address list.

    Each save overwrites the previous value; there is no history.
    """

    def __init__(
        self,
        store: KeyValueStore,
        data_key: str = "stake_data",
        address_key: str = "address_list",
    ) -> None:
        self._store = store
        self._data_key = data_key
        self._address_key = address_key

    async def save_result(self, result: ScanResult, addresses: Sequence[str]) -> None:
        payload = result.to_dict()
        payload["addresses"] = list(addresses)
        payload["lastUpdate"] = _now_ms()
        await self._store.set(self._data_key, json.dumps(payload))
        log.info("Snapshot saved under %s (%d records)", self._data_key, len(result.all_records))

    async def load_latest(self) -> dict | None:
        raw = await self._store.get(self._data_key)
        return json.loads(raw) if raw else None

    async def save_addresses(self, addresses: Sequence[str]) -> None:
        payload = {"addresses": list(addresses), "uploadTime": _now_ms()}
        await self._store.set(self._address_key, json.dumps(payload))
        log.info("Saved %d addresses under %s", len(addresses), self._address_key)

    async def load_addresses(self) -> list[str] | None:
        raw = await self._store.get(self._address_key)
        if not raw:
            return None
        return list(json.loads(raw).get("addresses", []))
