"""Configuration models for the scanner."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

DEFAULT_BSC_NODES = [
    "https://bsc-dataseed1.binance.org",
    "https://bsc-dataseed2.binance.org",
    "https://bsc-dataseed3.binance.org",
    "https://bsc-dataseed4.binance.org",
    "https://bsc-dataseed1.defibit.io",
    "https://bsc-dataseed1.ninicoin.io",
]


class ScanMode(str, Enum):
    """Requested scan mode. Accepted and recorded; scanning does not branch on it."""

    FULL = "full"


class StorageBackend(str, Enum):
    """Where scan snapshots are persisted."""

    SQLITE = "sqlite"
    REST = "rest"


@dataclass
class ScanSettings:
    """Batching and retry knobs handed to the scanner at construction."""

    batch_size: int = 10
    batch_delay: float = 0.2  # seconds between batches
    retry_limit: int = 3  # retries after the first attempt
    retry_delay: float = 1.0  # seconds, multiplied by the attempt number
    scan_timeout: float = 0  # seconds, 0 = unlimited
    max_addresses: int = 50_000


@dataclass
class ScannerConfig:
    """Complete scanner configuration."""

    log_level: str = "info"

    # Chain
    rpc_endpoints: list[str] = field(default_factory=lambda: list(DEFAULT_BSC_NODES))
    probe_timeout: float = 10.0  # seconds per endpoint health probe
    staking_contract: str = "0x72212F35aC448FE7763aA1BFdb360193Fa098E52"
    token_contract: str = "0x55d398326f99059fF775485246999027B3197955"  # USDT (BEP-20)
    lp_pool: str = "0xa2f464a2462aed49b9b31eb8861bc6b0bbb0483f"

    # Scan
    scan: ScanSettings = field(default_factory=ScanSettings)

    # Storage
    storage_backend: StorageBackend = StorageBackend.SQLITE
    db_path: str = "~/.stake_scanner/state.db"
    kv_url: str = ""
    kv_token: str = ""  # loaded from env var KV_REST_API_TOKEN
    data_key: str = "stake_data"
    address_key: str = "address_list"
