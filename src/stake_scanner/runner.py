"""Scan runner - wires node selection, scanning, aggregation and persistence."""

from __future__ import annotations

import asyncio
import logging
import time
from decimal import Decimal
from typing import Callable, Sequence

from stake_scanner.chain.client import StakingContractClient
from stake_scanner.chain.nodes import NodeConnection, NodeSelector
from stake_scanner.interfaces.reader import StakeReader
from stake_scanner.interfaces.store import PersistenceError
from stake_scanner.models.config import ScanMode, ScannerConfig
from stake_scanner.models.snapshots import ScanReport, ScanResult
from stake_scanner.scan.aggregator import StakeAggregator
from stake_scanner.scan.batch import BatchScanner
from stake_scanner.storage.snapshot import SnapshotRepository

log = logging.getLogger(__name__)


class StakeScanRunner:
    """Runs one full scan over a list of addresses.

    Only a failure to reach any RPC node aborts a run. Per-address and
    per-record failures end up in the result, and a failed save is logged
    while the result is still returned.
    """

    def __init__(
        self,
        cfg: ScannerConfig,
        repository: SnapshotRepository | None = None,
        selector: NodeSelector | None = None,
        reader_factory: Callable[[NodeConnection], StakeReader] | None = None,
    ) -> None:
        self._cfg = cfg
        self.repository = repository
        self.selector = selector or NodeSelector(cfg.rpc_endpoints, cfg.probe_timeout)
        self._reader_factory = reader_factory or self._contract_client

    def _contract_client(self, connection: NodeConnection) -> StakingContractClient:
        return StakingContractClient(
            connection,
            self._cfg.staking_contract,
            self._cfg.token_contract,
            retry_limit=self._cfg.scan.retry_limit,
            retry_delay=self._cfg.scan.retry_delay,
        )

    def validate(self, addresses: Sequence[str]) -> None:
        if not addresses:
            raise ValueError("No addresses to scan")
        limit = self._cfg.scan.max_addresses
        if len(addresses) > limit:
            raise ValueError(f"Too many addresses ({len(addresses)}, max {limit})")

    async def run_scan(
        self,
        addresses: Sequence[str],
        mode: ScanMode | str = ScanMode.FULL,
        now: int | None = None,
    ) -> ScanReport:
        """Scan ``addresses`` and persist the snapshot.

        Raises NodeConnectionError when no endpoint is reachable.
        """
        self.validate(addresses)
        mode = ScanMode(mode)
        settings = self._cfg.scan
        log.info("Starting scan: %d addresses, mode=%s", len(addresses), mode.value)

        # Budget covers node selection and the pool read too
        loop = asyncio.get_running_loop()
        deadline = loop.time() + settings.scan_timeout if settings.scan_timeout > 0 else None

        connection = await self.selector.connect()
        try:
            reader = self._reader_factory(connection)
            pool_balance = await reader.get_pool_balance(self._cfg.lp_pool)

            if now is None:
                now = int(time.time())

            scanner = BatchScanner(reader, settings.batch_size, settings.batch_delay)
            aggregator = StakeAggregator(now)
            async for batch in scanner.iter_batches(addresses, now, deadline):
                aggregator.add(batch)
            result = aggregator.build(total_addresses=len(addresses), mode=mode)
        finally:
            await connection.close()

        log.info(
            "Scan complete: %d/%d addresses ok, %d active records, total staked %s",
            result.success_count, result.total_addresses,
            len(result.active_records), result.stats.total_staked,
        )
        if result.failed_addresses:
            log.warning("%d addresses failed", len(result.failed_addresses))

        persisted = await self._persist(result, addresses)
        return ScanReport(
            result=result,
            pool_balance=pool_balance,
            endpoint=connection.endpoint,
            persisted=persisted,
        )

    async def _persist(self, result: ScanResult, addresses: Sequence[str]) -> bool:
        if self.repository is None:
            log.info("No store configured, skipping save")
            return False

        saved = True
        try:
            await self.repository.save_addresses(addresses)
        except PersistenceError as exc:
            log.error("Saving address list failed: %s", exc)
            saved = False
        try:
            await self.repository.save_result(result, addresses)
        except PersistenceError as exc:
            log.error("Saving scan snapshot failed: %s", exc)
            saved = False
        return saved

    async def pool_balance(self) -> Decimal:
        """Connect and read the LP pool's token balance."""
        connection = await self.selector.connect()
        try:
            return await self._reader_factory(connection).get_pool_balance(self._cfg.lp_pool)
        finally:
            await connection.close()
