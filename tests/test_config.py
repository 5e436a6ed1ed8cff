from __future__ import annotations

import pytest

from solfolio.config import DEFAULT_CLUSTER, DEFAULT_RPC_TIMEOUT_SEC, load_config

_ENV_KEYS = (
    "SOLFOLIO_ACCOUNT",
    "SOLFOLIO_CLUSTER",
    "SOLFOLIO_RPC_URL",
    "SOLFOLIO_SOURCE",
    "SOLFOLIO_RPC_TIMEOUT_SEC",
    "SOLFOLIO_LOG_FILE",
    "SOLFOLIO_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_run_against_mock_ledger_without_account() -> None:
    cfg = load_config()

    assert cfg.account is None
    assert cfg.cluster == DEFAULT_CLUSTER
    assert cfg.rpc_url is None
    assert cfg.source == "mock"
    assert cfg.rpc_timeout_sec == DEFAULT_RPC_TIMEOUT_SEC
    assert cfg.log_file is None
    assert cfg.log_level == "INFO"


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SOLFOLIO_ACCOUNT", "  wallet-1 ")
    monkeypatch.setenv("SOLFOLIO_CLUSTER", "mainnet-beta")
    monkeypatch.setenv("SOLFOLIO_RPC_URL", "https://rpc.example")
    monkeypatch.setenv("SOLFOLIO_SOURCE", "RPC")
    monkeypatch.setenv("SOLFOLIO_RPC_TIMEOUT_SEC", "2.5")
    monkeypatch.setenv("SOLFOLIO_LOG_FILE", "/tmp/solfolio.log")
    monkeypatch.setenv("SOLFOLIO_LOG_LEVEL", "debug")

    cfg = load_config()

    assert cfg.account == "wallet-1"
    assert cfg.cluster == "mainnet-beta"
    assert cfg.rpc_url == "https://rpc.example"
    assert cfg.source == "rpc"
    assert cfg.rpc_timeout_sec == 2.5
    assert cfg.log_file == "/tmp/solfolio.log"
    assert cfg.log_level == "DEBUG"


def test_blank_account_is_treated_as_disconnected(monkeypatch) -> None:
    monkeypatch.setenv("SOLFOLIO_ACCOUNT", "   ")

    assert load_config().account is None


def test_unknown_source_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("SOLFOLIO_SOURCE", "helius")

    with pytest.raises(ValueError, match="SOLFOLIO_SOURCE"):
        load_config()


@pytest.mark.parametrize("raw", ["0", "-1"])
def test_non_positive_timeout_is_rejected(monkeypatch, raw: str) -> None:
    monkeypatch.setenv("SOLFOLIO_RPC_TIMEOUT_SEC", raw)

    with pytest.raises(ValueError, match="SOLFOLIO_RPC_TIMEOUT_SEC"):
        load_config()
