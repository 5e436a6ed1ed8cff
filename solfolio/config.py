"""Runtime configuration loaded from environment variables."""
from __future__ import annotations

from dataclasses import dataclass
import os

DEFAULT_CLUSTER = "devnet"
DEFAULT_SOURCE = "mock"
DEFAULT_RPC_TIMEOUT_SEC = 10.0
DEFAULT_LOG_LEVEL = "INFO"

SOURCES = ("mock", "rpc")


@dataclass(frozen=True)
class WalletConfig:
    account: str | None
    cluster: str
    rpc_url: str | None
    source: str
    rpc_timeout_sec: float
    log_file: str | None
    log_level: str


def load_config() -> WalletConfig:
    """Load config from environment; defaults run against the built-in mock ledger."""
    source = (os.getenv("SOLFOLIO_SOURCE") or DEFAULT_SOURCE).strip().lower()
    if source not in SOURCES:
        raise ValueError(f"SOLFOLIO_SOURCE must be one of {', '.join(SOURCES)} (got {source!r})")
    timeout = float(os.getenv("SOLFOLIO_RPC_TIMEOUT_SEC", DEFAULT_RPC_TIMEOUT_SEC))
    if timeout <= 0:
        raise ValueError(f"SOLFOLIO_RPC_TIMEOUT_SEC must be positive (got {timeout})")
    return WalletConfig(
        account=(os.getenv("SOLFOLIO_ACCOUNT") or "").strip() or None,
        cluster=(os.getenv("SOLFOLIO_CLUSTER") or DEFAULT_CLUSTER).strip(),
        rpc_url=os.getenv("SOLFOLIO_RPC_URL") or None,
        source=source,
        rpc_timeout_sec=timeout,
        log_file=os.getenv("SOLFOLIO_LOG_FILE") or None,
        log_level=(os.getenv("SOLFOLIO_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper(),
    )
