"""Wallet connection state: the connected account and the cluster it lives on."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

_CLUSTER_RPC_URLS: dict[str, str] = {
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "localnet": "http://127.0.0.1:8899",
}

AccountListener = Callable[[str | None, str | None], None]


@dataclass(frozen=True)
class Cluster:
    label: str
    rpc_url: str


def cluster_for(label: str, rpc_url: str | None = None) -> Cluster:
    """Resolve a cluster label; an explicit rpc_url also admits custom labels."""
    key = (label or "").strip()
    if rpc_url:
        return Cluster(label=key or "custom", rpc_url=rpc_url)
    url = _CLUSTER_RPC_URLS.get(key)
    if url is None:
        known = ", ".join(_CLUSTER_RPC_URLS)
        raise ValueError(f"unknown cluster {label!r} (known: {known}); pass an RPC URL for custom clusters")
    return Cluster(label=key, rpc_url=url)


class WalletSession:
    """Holds the connected account and notifies listeners when it changes."""

    def __init__(self, cluster: Cluster, account: str | None = None) -> None:
        self._cluster = cluster
        self._account = (account or "").strip() or None
        self._listeners: list[AccountListener] = []

    @property
    def account(self) -> str | None:
        return self._account

    @property
    def cluster(self) -> Cluster:
        return self._cluster

    @property
    def connected(self) -> bool:
        return self._account is not None

    def subscribe(self, listener: AccountListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def connect(self, account: str) -> None:
        account = (account or "").strip()
        if not account:
            raise ValueError("account must be a non-empty address")
        self._set_account(account)

    def disconnect(self) -> None:
        self._set_account(None)

    def _set_account(self, account: str | None) -> None:
        previous = self._account
        if previous == account:
            return
        self._account = account
        logger.info("wallet account changed: %s -> %s", previous, account)
        for listener in list(self._listeners):
            listener(previous, account)
