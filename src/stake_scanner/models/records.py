"""Stake record models produced by the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import NamedTuple

# stake_index -> lock length in seconds (1, 15 and 30 days)
STAKE_DURATIONS: dict[int, int] = {
    0: 86_400,
    1: 1_296_000,
    2: 2_592_000,
}


class RawStakeRecord(NamedTuple):
    """userStakeRecord() return tuple, as decoded by web3."""

    stake_time: int  # uint40
    amount_raw: int  # uint160, 18 decimals
    is_redeemed: bool
    stake_index: int  # uint8


@dataclass(frozen=True)
class StakeRecord:
    """One deposit made by an address."""

    address: str
    amount: Decimal
    stake_time: int  # unix seconds
    stake_index: int  # 0 / 1 / 2 -> 1d / 15d / 30d lock
    is_redeemed: bool

    def to_dict(self) -> dict:
        return {
            "address": self.address,
            "amount": float(self.amount),
            "stakeTime": self.stake_time,
            "stakeIndex": self.stake_index,
            "isRedeemed": self.is_redeemed,
        }


@dataclass(frozen=True)
class ActiveRecord(StakeRecord):
    """An unredeemed stake with its unlock schedule relative to scan start."""

    unlock_time: int
    time_remaining: int  # seconds, negative once unlocked

    @classmethod
    def from_record(cls, record: StakeRecord, now: int) -> ActiveRecord:
        unlock_time = record.stake_time + STAKE_DURATIONS[record.stake_index]
        return cls(
            address=record.address,
            amount=record.amount,
            stake_time=record.stake_time,
            stake_index=record.stake_index,
            is_redeemed=record.is_redeemed,
            unlock_time=unlock_time,
            time_remaining=unlock_time - now,
        )

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["unlockTime"] = self.unlock_time
        d["timeRemaining"] = self.time_remaining
        return d


@dataclass
class AddressScanResult:
    """Outcome of scanning a single address."""

    address: str
    success: bool = False
    all_records: list[StakeRecord] = field(default_factory=list)
    active_records: list[ActiveRecord] = field(default_factory=list)
    error: str | None = None
