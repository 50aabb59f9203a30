"""Data models for the stake scanner."""

from stake_scanner.models.config import (
    ScanMode,
    ScannerConfig,
    ScanSettings,
    StorageBackend,
)
from stake_scanner.models.records import (
    STAKE_DURATIONS,
    ActiveRecord,
    AddressScanResult,
    RawStakeRecord,
    StakeRecord,
)
from stake_scanner.models.snapshots import DailyBucket, ScanReport, ScanResult, ScanStats

__all__ = [
    "ScanMode", "ScannerConfig", "ScanSettings", "StorageBackend",
    "STAKE_DURATIONS", "ActiveRecord", "AddressScanResult", "RawStakeRecord",
    "StakeRecord",
    "DailyBucket", "ScanReport", "ScanResult", "ScanStats",
]
