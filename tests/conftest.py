"""Shared fixtures for stake_scanner tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key

from stake_scanner.chain.nodes import NodeSelector
from stake_scanner.models.config import ScannerConfig, ScanSettings, StorageBackend
from stake_scanner.runner import StakeScanRunner
from stake_scanner.storage.snapshot import SnapshotRepository
from stake_scanner.storage.sqlite import SQLiteKeyValueStore

from tests.mocks import FakeWeb3, FakeWeb3Factory, MemoryStore, MockStakeReader

STAKING_CONTRACT = "0x72212F35aC448FE7763aA1BFdb360193Fa098E52"
TOKEN_CONTRACT = "0x55d398326f99059fF775485246999027B3197955"
LP_POOL = "0xa2f464a2462aed49b9b31eb8861bc6b0bbb0483f"

EXPLORER_BASE = "https://bscscan.com"

NODE_A = "https://node-a.example"
NODE_B = "https://node-b.example"

ENV_VARS = [
    "STAKE_SCANNER_RPC_URLS",
    "STAKE_SCANNER_BATCH_SIZE",
    "STAKE_SCANNER_SCAN_TIMEOUT",
    "STAKE_SCANNER_LOG_LEVEL",
    "STAKE_SCANNER_STORAGE_BACKEND",
    "KV_REST_API_URL",
    "KV_REST_API_TOKEN",
]


def bscscan_link(kind: str, id: str, label: str | None = None) -> str:
    """Build an HTML anchor to bscscan for the report."""
    url = f"{EXPLORER_BASE}/{kind}/{id}"
    text = label or f"{id[:8]}...{id[-4:]}"
    return f'<a href="{url}" target="_blank">{text}</a>'


# ── Report metadata & explorer links ─────────────────────────────


def pytest_configure(config):
    """Add network info to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "BNB Smart Chain"
    meta["Staking Contract"] = STAKING_CONTRACT
    meta["LP Pool"] = LP_POOL


def pytest_html_results_summary(prefix, summary, postfix):
    """Inject clickable bscscan links into the report summary."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>BscScan Links</strong><br/>"
        f'Staking: {bscscan_link("address", STAKING_CONTRACT, STAKING_CONTRACT)}<br/>'
        f'LP Pool: {bscscan_link("address", LP_POOL, LP_POOL)}'
        "</div>"
    )


def make_test_config(**overrides) -> ScannerConfig:
    """Build a ScannerConfig suitable for testing: tiny batches, no delays."""
    scan = overrides.pop("scan", None) or ScanSettings(
        batch_size=2,
        batch_delay=0,
        retry_limit=2,
        retry_delay=0,
        scan_timeout=0,
        max_addresses=100,
    )
    defaults = dict(
        rpc_endpoints=[NODE_A, NODE_B],
        probe_timeout=1.0,
        staking_contract=STAKING_CONTRACT,
        token_contract=TOKEN_CONTRACT,
        lp_pool=LP_POOL,
        scan=scan,
        storage_backend=StorageBackend.SQLITE,
        db_path=":memory:",
    )
    defaults.update(overrides)
    return ScannerConfig(**defaults)


@pytest.fixture
def clean_env(monkeypatch):
    """Strip scanner env vars so only the test's own settings apply."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_config():
    """Default ScannerConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteKeyValueStore."""
    s = SQLiteKeyValueStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def mock_reader():
    return MockStakeReader()


@pytest.fixture
def web3_factory():
    """Two fake nodes: A is down, B answers."""
    return FakeWeb3Factory({
        NODE_A: FakeWeb3(NODE_A, healthy=False),
        NODE_B: FakeWeb3(NODE_B, healthy=True),
    })


@pytest.fixture
def runner(test_config, store, mock_reader, web3_factory):
    """StakeScanRunner wired to fake nodes, a mock reader and an in-memory store."""
    return StakeScanRunner(
        test_config,
        repository=SnapshotRepository(store, test_config.data_key, test_config.address_key),
        selector=NodeSelector(test_config.rpc_endpoints, 1.0, web3_factory=web3_factory),
        reader_factory=lambda connection: mock_reader,
    )
