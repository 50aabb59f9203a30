"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from stake_scanner.models.config import ScannerConfig, ScanSettings, StorageBackend


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "STAKE_SCANNER_",
) -> ScannerConfig:
    """Load scanner configuration from a TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (STAKE_SCANNER_RPC_URLS, KV_REST_API_URL, etc.)
        2. TOML config file
        3. Defaults from ScannerConfig
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = ScannerConfig()

    # ── Scanner section ────────────────────────────────────
    scanner = raw.get("scanner", {})
    if v := scanner.get("log_level"):
        cfg.log_level = str(v)

    # ── Chain section ──────────────────────────────────────
    chain = raw.get("chain", {})
    if v := chain.get("rpc_endpoints"):
        cfg.rpc_endpoints = [str(e) for e in v]
    if v := chain.get("probe_timeout"):
        cfg.probe_timeout = float(v)
    if v := chain.get("staking_contract"):
        cfg.staking_contract = str(v)
    if v := chain.get("token_contract"):
        cfg.token_contract = str(v)
    if v := chain.get("lp_pool"):
        cfg.lp_pool = str(v)

    # ── Scan section ───────────────────────────────────────
    scan = raw.get("scan", {})
    defaults = ScanSettings()
    cfg.scan = ScanSettings(
        batch_size=int(scan.get("batch_size", defaults.batch_size)),
        batch_delay=float(scan.get("batch_delay", defaults.batch_delay)),
        retry_limit=int(scan.get("retry_limit", defaults.retry_limit)),
        retry_delay=float(scan.get("retry_delay", defaults.retry_delay)),
        scan_timeout=float(scan.get("scan_timeout", defaults.scan_timeout)),
        max_addresses=int(scan.get("max_addresses", defaults.max_addresses)),
    )

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("backend"):
        cfg.storage_backend = StorageBackend(v)
    if v := storage.get("db_path"):
        cfg.db_path = str(v)
    if v := storage.get("kv_url"):
        cfg.kv_url = str(v)
    if v := storage.get("kv_token"):
        cfg.kv_token = str(v)
    if v := storage.get("data_key"):
        cfg.data_key = str(v)
    if v := storage.get("address_key"):
        cfg.address_key = str(v)

    # ── Environment variable overrides (highest priority) ──
    if urls := os.environ.get(f"{env_prefix}RPC_URLS"):
        cfg.rpc_endpoints = [u.strip() for u in urls.split(",") if u.strip()]
    if size := os.environ.get(f"{env_prefix}BATCH_SIZE"):
        cfg.scan.batch_size = int(size)
    if timeout := os.environ.get(f"{env_prefix}SCAN_TIMEOUT"):
        cfg.scan.scan_timeout = float(timeout)
    if level := os.environ.get(f"{env_prefix}LOG_LEVEL"):
        cfg.log_level = level

    # Same variable names as the hosted KV deployment
    if kv_url := os.environ.get("KV_REST_API_URL"):
        cfg.kv_url = kv_url
        cfg.storage_backend = StorageBackend.REST
    if kv_token := os.environ.get("KV_REST_API_TOKEN"):
        cfg.kv_token = kv_token
    if backend := os.environ.get(f"{env_prefix}STORAGE_BACKEND"):
        cfg.storage_backend = StorageBackend(backend)

    _validate(cfg)

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    return cfg


def _validate(cfg: ScannerConfig) -> None:
    if cfg.scan.batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {cfg.scan.batch_size}")
    if cfg.scan.retry_limit < 0:
        raise ValueError(f"retry_limit must be >= 0, got {cfg.scan.retry_limit}")
    if cfg.scan.batch_delay < 0 or cfg.scan.retry_delay < 0:
        raise ValueError("batch_delay and retry_delay must not be negative")
    if cfg.log_level.upper() not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
        raise ValueError(f"Unknown log_level {cfg.log_level!r}")
