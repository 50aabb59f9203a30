"""Scan result models and their JSON-serializable form.

The dict layout written by ``to_dict()`` is the one the dashboard reads, so
keys stay camelCase and amounts are plain JSON numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from stake_scanner.models.config import ScanMode
from stake_scanner.models.records import ActiveRecord, StakeRecord

POOL_INDEXES = (0, 1, 2)


def _empty_pools() -> dict[int, Decimal]:
    return {i: Decimal(0) for i in POOL_INDEXES}


def _empty_counts() -> dict[int, int]:
    return {i: 0 for i in POOL_INDEXES}


@dataclass(frozen=True)
class ScanStats:
    """Totals over the active (unredeemed) records of one scan."""

    total_staked: Decimal = Decimal(0)
    total_staked_1d: Decimal = Decimal(0)
    total_staked_15d: Decimal = Decimal(0)
    total_staked_30d: Decimal = Decimal(0)
    count_1d: int = 0
    count_15d: int = 0
    count_30d: int = 0
    # cumulative windows: unlock_2d <= unlock_7d <= unlock_15d
    unlock_2d: Decimal = Decimal(0)
    unlock_7d: Decimal = Decimal(0)
    unlock_15d: Decimal = Decimal(0)

    def to_dict(self) -> dict:
        return {
            "totalStaked": float(self.total_staked),
            "totalStaked1d": float(self.total_staked_1d),
            "totalStaked15d": float(self.total_staked_15d),
            "totalStaked30d": float(self.total_staked_30d),
            "count1d": self.count_1d,
            "count15d": self.count_15d,
            "count30d": self.count_30d,
            "unlock2d": float(self.unlock_2d),
            "unlock7d": float(self.unlock_7d),
            "unlock15d": float(self.unlock_15d),
        }


@dataclass
class DailyBucket:
    """New stake for one UTC calendar day, split by pool."""

    date: str  # YYYY-MM-DD
    new_stake: Decimal = Decimal(0)
    by_pool: dict[int, Decimal] = field(default_factory=_empty_pools)
    count: dict[int, int] = field(default_factory=_empty_counts)

    def add(self, record: StakeRecord) -> None:
        self.new_stake += record.amount
        self.by_pool[record.stake_index] += record.amount
        self.count[record.stake_index] += 1

    def to_entry(self) -> list:
        """``[date, {...}]`` pair, as the dashboard expects."""
        return [
            self.date,
            {
                "newStake": float(self.new_stake),
                "byPool": {str(k): float(v) for k, v in self.by_pool.items()},
                "count": {str(k): v for k, v in self.count.items()},
            },
        ]


@dataclass(frozen=True)
class ScanResult:
    """Point-in-time snapshot of one full scan."""

    stats: ScanStats
    active_records: tuple[ActiveRecord, ...]
    all_records: tuple[StakeRecord, ...]
    daily_stats: tuple[DailyBucket, ...]
    failed_addresses: tuple[str, ...]
    total_addresses: int
    success_count: int
    scanned_at: int  # unix seconds, the "now" used for unlock windows
    mode: ScanMode = ScanMode.FULL

    def to_dict(self) -> dict:
        return {
            "stats": self.stats.to_dict(),
            "activeRecords": [r.to_dict() for r in self.active_records],
            "allRecords": [r.to_dict() for r in self.all_records],
            "dailyStats": [b.to_entry() for b in self.daily_stats],
            "failedAddresses": list(self.failed_addresses),
            "totalAddresses": self.total_addresses,
            "successCount": self.success_count,
            "scannedAt": self.scanned_at,
            "mode": self.mode.value,
        }


@dataclass(frozen=True)
class ScanReport:
    """What a scan run hands back to its caller."""

    result: ScanResult
    pool_balance: Decimal  # informational, 0 when the read failed
    endpoint: str
    persisted: bool
