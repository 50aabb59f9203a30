"""Batch scanner - per-address stake retrieval in throttled concurrent batches."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Sequence

from stake_scanner.chain.client import to_token_amount
from stake_scanner.interfaces.reader import StakeReader
from stake_scanner.models.records import (
    STAKE_DURATIONS,
    ActiveRecord,
    AddressScanResult,
    RawStakeRecord,
    StakeRecord,
)
from stake_scanner.scan.aggregator import utc_date

log = logging.getLogger(__name__)

BUDGET_EXHAUSTED = "scan time budget exhausted"


def stake_record_from_raw(address: str, raw: RawStakeRecord) -> StakeRecord:
    """Build a StakeRecord, rejecting pool indexes with no known lock length
    and stake times that have no calendar date.
    """
    if raw.stake_index not in STAKE_DURATIONS:
        raise ValueError(f"unknown stake index {raw.stake_index}")
    try:
        utc_date(raw.stake_time)
    except (ValueError, OverflowError, OSError) as exc:
        raise ValueError(f"stake time {raw.stake_time} out of range") from exc
    return StakeRecord(
        address=address,
        amount=to_token_amount(raw.amount_raw),
        stake_time=raw.stake_time,
        stake_index=raw.stake_index,
        is_redeemed=raw.is_redeemed,
    )


class BatchScanner:
    """Scans addresses in consecutive batches of ``batch_size``.

    Addresses inside a batch are read concurrently and the batch ends only
    when all of them (retries included) have finished. ``batch_delay``
    seconds separate batches to stay under public RPC rate limits.
    """

    def __init__(
        self,
        reader: StakeReader,
        batch_size: int = 10,
        batch_delay: float = 0.2,
    ) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {batch_size}")
        self._reader = reader
        self._batch_size = batch_size
        self._batch_delay = batch_delay

    async def scan(
        self,
        addresses: Sequence[str],
        now: int,
        deadline: float | None = None,
    ) -> list[AddressScanResult]:
        """Scan every address and return one result per address."""
        results: list[AddressScanResult] = []
        async for batch in self.iter_batches(addresses, now, deadline):
            results.extend(batch)
        return results

    async def iter_batches(
        self,
        addresses: Sequence[str],
        now: int,
        deadline: float | None = None,
    ) -> AsyncIterator[list[AddressScanResult]]:
        """Yield the results of each batch as soon as it completes.

        ``deadline`` is an event-loop time. Once it passes, the running batch
        is cancelled and a final list is yielded that marks every address not
        yet scanned as failed.
        """
        loop = asyncio.get_running_loop()
        total = len(addresses)
        batch_count = (total + self._batch_size - 1) // self._batch_size

        for batch_no, start in enumerate(range(0, total, self._batch_size), start=1):
            batch = addresses[start:start + self._batch_size]

            if deadline is not None and loop.time() >= deadline:
                yield self._unscanned(addresses[start:], batch_no, batch_count)
                return

            work = asyncio.gather(*(self._scan_address(a, now) for a in batch))
            try:
                if deadline is None:
                    results = await work
                else:
                    results = await asyncio.wait_for(work, timeout=deadline - loop.time())
            except asyncio.TimeoutError:
                yield self._unscanned(addresses[start:], batch_no, batch_count)
                return

            log.info(
                "Batch %d/%d done: %d addresses (%d/%d scanned)",
                batch_no, batch_count, len(batch), start + len(batch), total,
            )
            yield list(results)

            if batch_no < batch_count and self._batch_delay > 0:
                await asyncio.sleep(self._batch_delay)

    async def _scan_address(self, address: str, now: int) -> AddressScanResult:
        result = AddressScanResult(address=address)

        try:
            count = await self._reader.get_stake_count(address)
        except Exception as exc:
            log.warning("Scan of %s failed: %s", address, exc)
            result.error = str(exc) or type(exc).__name__
            return result

        for index in range(count):
            try:
                raw = await self._reader.get_stake_record(address, index)
                record = stake_record_from_raw(address, raw)
            except Exception as exc:
                log.warning("Skipping record %s[%d]: %s", address, index, exc)
                continue

            result.all_records.append(record)
            if not record.is_redeemed:
                result.active_records.append(ActiveRecord.from_record(record, now))

        result.success = True
        return result

    @staticmethod
    def _unscanned(
        addresses: Sequence[str], batch_no: int, batch_count: int,
    ) -> list[AddressScanResult]:
        log.warning(
            "Scan time budget exhausted at batch %d/%d; %d addresses not scanned",
            batch_no, batch_count, len(addresses),
        )
        return [
            AddressScanResult(address=a, success=False, error=BUDGET_EXHAUSTED)
            for a in addresses
        ]
