"""Aggregation of per-address scan results into a ScanResult.

The aggregator is fed one batch at a time by the orchestrating coroutine,
after that batch has been joined, so it needs no locking. Output order never
depends on which address finished first: active records are sorted
explicitly and daily buckets are sorted by date.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable

from stake_scanner.models.config import ScanMode
from stake_scanner.models.records import ActiveRecord, AddressScanResult, StakeRecord
from stake_scanner.models.snapshots import DailyBucket, ScanResult, ScanStats

log = logging.getLogger(__name__)

# Unlock windows, seconds from scan start
UNLOCK_WINDOWS = {
    "unlock_2d": 172_800,
    "unlock_7d": 604_800,
    "unlock_15d": 1_296_000,
}

_POOL_TOTAL_FIELDS = {0: "total_staked_1d", 1: "total_staked_15d", 2: "total_staked_30d"}
_POOL_COUNT_FIELDS = {0: "count_1d", 1: "count_15d", 2: "count_30d"}


def utc_date(timestamp: int) -> str:
    """YYYY-MM-DD of a unix timestamp, in UTC."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


class StakeAggregator:
    """Running totals over the batches of one scan."""

    def __init__(self, now: int) -> None:
        self._now = now
        self._limits = {name: now + secs for name, secs in UNLOCK_WINDOWS.items()}
        self._all: list[StakeRecord] = []
        self._active: list[ActiveRecord] = []
        self._daily: dict[str, DailyBucket] = {}
        self._totals: dict[str, Decimal] = {
            "total_staked": Decimal(0),
            **{f: Decimal(0) for f in _POOL_TOTAL_FIELDS.values()},
            **{name: Decimal(0) for name in UNLOCK_WINDOWS},
        }
        self._counts: dict[str, int] = {f: 0 for f in _POOL_COUNT_FIELDS.values()}
        self._failed: list[str] = []
        self._seen = 0

    @property
    def now(self) -> int:
        return self._now

    def add(self, results: Iterable[AddressScanResult]) -> None:
        """Fold one batch of per-address results into the running state."""
        for result in results:
            self._seen += 1
            if not result.success:
                self._failed.append(result.address)
                continue
            try:
                self._add_success(result)
            except Exception as exc:
                log.error("Could not aggregate %s: %s", result.address, exc, exc_info=True)
                self._failed.append(result.address)

    def _add_success(self, result: AddressScanResult) -> None:
        # Stage everything first so a bad record leaves no partial state behind
        staged_daily: list[tuple[str, StakeRecord]] = []
        for record in result.all_records:
            if record.stake_index not in _POOL_TOTAL_FIELDS:
                raise ValueError(f"unknown stake index {record.stake_index}")
            staged_daily.append((utc_date(record.stake_time), record))
        for record in result.active_records:
            if record.stake_index not in _POOL_TOTAL_FIELDS:
                raise ValueError(f"unknown stake index {record.stake_index}")

        for date, record in staged_daily:
            bucket = self._daily.get(date)
            if bucket is None:
                bucket = self._daily[date] = DailyBucket(date=date)
            bucket.add(record)
        self._all.extend(result.all_records)

        for record in result.active_records:
            self._active.append(record)
            self._totals["total_staked"] += record.amount
            self._totals[_POOL_TOTAL_FIELDS[record.stake_index]] += record.amount
            self._counts[_POOL_COUNT_FIELDS[record.stake_index]] += 1
            for name, limit in self._limits.items():
                if record.unlock_time <= limit:
                    self._totals[name] += record.amount

    def build(
        self,
        total_addresses: int | None = None,
        mode: ScanMode = ScanMode.FULL,
    ) -> ScanResult:
        """Snapshot the accumulated state. Does not modify the aggregator."""
        total = self._seen if total_addresses is None else total_addresses
        active = sorted(self._active, key=lambda r: r.stake_time, reverse=True)
        daily = [
            DailyBucket(
                date=d,
                new_stake=self._daily[d].new_stake,
                by_pool=dict(self._daily[d].by_pool),
                count=dict(self._daily[d].count),
            )
            for d in sorted(self._daily)
        ]
        stats = ScanStats(**self._totals, **self._counts)
        return ScanResult(
            stats=stats,
            active_records=tuple(active),
            all_records=tuple(self._all),
            daily_stats=tuple(daily),
            failed_addresses=tuple(self._failed),
            total_addresses=total,
            success_count=total - len(self._failed),
            scanned_at=self._now,
            mode=mode,
        )


def aggregate(
    results: Iterable[AddressScanResult],
    now: int,
    mode: ScanMode = ScanMode.FULL,
) -> ScanResult:
    """One-shot aggregation of a complete list of per-address results."""
    agg = StakeAggregator(now)
    agg.add(results)
    return agg.build(mode=mode)
