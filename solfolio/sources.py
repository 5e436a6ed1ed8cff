"""Ledger data sources: anything that can turn an account into a snapshot.

`MockLedgerSource` serves fixed data for demos and offline use;
`SolanaRpcSource` reads balances from a cluster's JSON-RPC endpoint.
"""
from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Any, Protocol

import aiohttp

from .config import WalletConfig
from .identity import Cluster
from .models import PortfolioSnapshot

logger = logging.getLogger(__name__)

USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"

TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"

KNOWN_SYMBOLS: dict[str, str] = {
    USDC_MINT: "USDC",
    USDT_MINT: "USDT",
    "So11111111111111111111111111111111111111112": "wSOL",
}

_MOCK_PAYLOAD: dict[str, Any] = {
    "balance": 2500000000,
    "tokens": [
        {"mint": USDC_MINT, "amount": "1000000", "decimals": 6, "symbol": "USDC"},
        {"mint": USDT_MINT, "amount": "500000000", "decimals": 6, "symbol": "USDT"},
    ],
}


class FetchFailure(Exception):
    """A ledger read failed; the cause is not distinguished further."""


class LedgerSource(Protocol):
    async def fetch(self, account: str) -> PortfolioSnapshot:
        ...


class MockLedgerSource:
    """Returns the same holdings for every account."""

    def __init__(self, *, latency_sec: float = 0.0, fail: bool = False) -> None:
        self.latency_sec = latency_sec
        self.fail = fail

    async def fetch(self, account: str) -> PortfolioSnapshot:
        if self.latency_sec > 0:
            await asyncio.sleep(self.latency_sec)
        if self.fail:
            raise FetchFailure(f"mock ledger configured to fail for {account}")
        return PortfolioSnapshot.from_payload(_MOCK_PAYLOAD)

    async def close(self) -> None:
        return None


class SolanaRpcSource:
    """Reads SOL balance and SPL token accounts over Solana JSON-RPC."""

    def __init__(
        self,
        cluster: Cluster,
        *,
        timeout_sec: float = 10.0,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        self._cluster = cluster
        self._timeout = aiohttp.ClientTimeout(total=timeout_sec)
        self._session = session
        self._owns_session = session is None
        self._ids = itertools.count(1)

    async def fetch(self, account: str) -> PortfolioSnapshot:
        calls = [
            asyncio.ensure_future(self._call("getBalance", [account])),
            asyncio.ensure_future(
                self._call(
                    "getTokenAccountsByOwner",
                    [account, {"programId": TOKEN_PROGRAM_ID}, {"encoding": "jsonParsed"}],
                )
            ),
            asyncio.ensure_future(
                self._call(
                    "getTokenAccountsByOwner",
                    [account, {"programId": TOKEN_2022_PROGRAM_ID}, {"encoding": "jsonParsed"}],
                )
            ),
        ]
        try:
            lamports_result, *token_results = await asyncio.gather(*calls)
        except BaseException:
            # One failed call fails the read; stop the rest before the session can close.
            for call in calls:
                call.cancel()
            await asyncio.gather(*calls, return_exceptions=True)
            raise
        try:
            lamports = int(lamports_result["value"])
            token_accounts: list[dict] = []
            for result in token_results:
                if not isinstance(result, dict):
                    raise TypeError(f"token account result is {type(result).__name__}, expected object")
                token_accounts.extend(result.get("value") or [])
            payload = {
                "balance": lamports,
                "tokens": _merge_token_accounts(token_accounts),
            }
            return PortfolioSnapshot.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise FetchFailure(f"malformed ledger response for {account}: {exc}") from exc

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
            self._owns_session = True
        return self._session

    async def _call(self, method: str, params: list) -> Any:
        body = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        session = self._ensure_session()
        try:
            async with session.post(self._cluster.rpc_url, json=body, timeout=self._timeout) as resp:
                resp.raise_for_status()
                data = await resp.json()
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
            raise FetchFailure(f"{method} request to {self._cluster.label} failed: {exc}") from exc
        if not isinstance(data, dict):
            raise FetchFailure(f"{method} returned a non-object response")
        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else error
            raise FetchFailure(f"{method} rejected by {self._cluster.label}: {message}")
        if "result" not in data:
            raise FetchFailure(f"{method} response has no result")
        logger.debug("%s ok (%s)", method, self._cluster.label)
        return data["result"]


def _merge_token_accounts(accounts: list[dict]) -> list[dict[str, Any]]:
    """Collapse token accounts into one holding per mint, in first-seen order."""
    merged: dict[str, dict[str, Any]] = {}
    for entry in accounts:
        info = entry["account"]["data"]["parsed"]["info"]
        mint = str(info["mint"])
        token_amount = info["tokenAmount"]
        raw = int(token_amount["amount"])
        decimals = int(token_amount["decimals"])
        holding = merged.get(mint)
        if holding is None:
            merged[mint] = {"mint": mint, "raw": raw, "decimals": decimals}
        else:
            holding["raw"] += raw
    tokens = []
    for mint, holding in merged.items():
        if holding["raw"] <= 0:
            continue
        token: dict[str, Any] = {
            "mint": mint,
            "amount": str(holding["raw"]),
            "decimals": holding["decimals"],
        }
        symbol = KNOWN_SYMBOLS.get(mint)
        if symbol:
            token["symbol"] = symbol
        tokens.append(token)
    return tokens


def build_source(config: WalletConfig, cluster: Cluster) -> MockLedgerSource | SolanaRpcSource:
    if config.source == "rpc":
        return SolanaRpcSource(cluster, timeout_sec=config.rpc_timeout_sec)
    return MockLedgerSource()
