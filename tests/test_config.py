"""Configuration loading from TOML and the environment."""

from __future__ import annotations

from pathlib import Path

import pytest

from stake_scanner.config import load_config
from stake_scanner.models.config import DEFAULT_BSC_NODES, StorageBackend

pytestmark = pytest.mark.usefixtures("clean_env")


def write_toml(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "scanner.toml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults():
    cfg = load_config()
    assert cfg.rpc_endpoints == DEFAULT_BSC_NODES
    assert cfg.scan.batch_size == 10
    assert cfg.scan.retry_limit == 3
    assert cfg.scan.scan_timeout == 0
    assert cfg.storage_backend == StorageBackend.SQLITE
    assert cfg.db_path == str(Path("~/.stake_scanner/state.db").expanduser())
    assert cfg.data_key == "stake_data"
    assert cfg.address_key == "address_list"


def test_missing_file_falls_back_to_defaults(tmp_path):
    cfg = load_config(tmp_path / "absent.toml")
    assert cfg.scan.batch_size == 10


def test_toml_sections(tmp_path):
    path = write_toml(tmp_path, """
[scanner]
log_level = "debug"

[chain]
rpc_endpoints = ["https://rpc-1.example", "https://rpc-2.example"]
probe_timeout = 3.5
lp_pool = "0x0000000000000000000000000000000000000001"

[scan]
batch_size = 25
batch_delay = 0.5
retry_limit = 5
scan_timeout = 240

[storage]
backend = "rest"
kv_url = "https://kv.example"
kv_token = "tok"
data_key = "stakes"
""")

    cfg = load_config(path)

    assert cfg.log_level == "debug"
    assert cfg.rpc_endpoints == ["https://rpc-1.example", "https://rpc-2.example"]
    assert cfg.probe_timeout == 3.5
    assert cfg.lp_pool.endswith("01")
    assert cfg.scan.batch_size == 25
    assert cfg.scan.batch_delay == 0.5
    assert cfg.scan.retry_limit == 5
    assert cfg.scan.retry_delay == 1.0
    assert cfg.scan.scan_timeout == 240
    assert cfg.storage_backend == StorageBackend.REST
    assert cfg.kv_url == "https://kv.example"
    assert cfg.data_key == "stakes"
    assert cfg.address_key == "address_list"


def test_env_overrides_toml(tmp_path, monkeypatch):
    path = write_toml(tmp_path, '[scan]\nbatch_size = 25\n')
    monkeypatch.setenv("STAKE_SCANNER_BATCH_SIZE", "4")
    monkeypatch.setenv("STAKE_SCANNER_RPC_URLS", "https://a.example, https://b.example,")
    monkeypatch.setenv("STAKE_SCANNER_SCAN_TIMEOUT", "90")

    cfg = load_config(path)

    assert cfg.scan.batch_size == 4
    assert cfg.rpc_endpoints == ["https://a.example", "https://b.example"]
    assert cfg.scan.scan_timeout == 90.0


def test_kv_env_selects_rest_backend(monkeypatch):
    monkeypatch.setenv("KV_REST_API_URL", "https://kv.example")
    monkeypatch.setenv("KV_REST_API_TOKEN", "secret")

    cfg = load_config()

    assert cfg.storage_backend == StorageBackend.REST
    assert cfg.kv_url == "https://kv.example"
    assert cfg.kv_token == "secret"


def test_explicit_backend_env_wins(monkeypatch):
    monkeypatch.setenv("KV_REST_API_URL", "https://kv.example")
    monkeypatch.setenv("STAKE_SCANNER_STORAGE_BACKEND", "sqlite")
    assert load_config().storage_backend == StorageBackend.SQLITE


def test_memory_db_path_is_kept(tmp_path):
    path = write_toml(tmp_path, '[storage]\ndb_path = ":memory:"\n')
    assert load_config(path).db_path == ":memory:"


@pytest.mark.parametrize("toml", [
    "[scan]\nbatch_size = 0\n",
    "[scan]\nretry_limit = -1\n",
    "[scan]\nbatch_delay = -0.1\n",
    '[scanner]\nlog_level = "chatty"\n',
    '[storage]\nbackend = "redis"\n',
])
def test_invalid_values_rejected(tmp_path, toml):
    with pytest.raises(ValueError):
        load_config(write_toml(tmp_path, toml))
