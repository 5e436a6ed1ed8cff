"""Portfolio snapshot data model.

Snapshots are immutable: a refresh builds a new one and swaps it in whole.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Mapping

UNKNOWN_TOKEN_LABEL = "Unknown Token"


def _parse_amount(raw: object) -> float:
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        raise ValueError(f"token amount is not numeric: {raw!r}") from None
    if math.isnan(value) or not math.isfinite(value):
        raise ValueError(f"token amount is not finite: {raw!r}")
    if value < 0:
        raise ValueError(f"token amount is negative: {raw!r}")
    return value


@dataclass(frozen=True)
class TokenHolding:
    mint: str
    amount: str
    decimals: int
    symbol: str | None = None

    @property
    def label(self) -> str:
        return self.symbol or UNKNOWN_TOKEN_LABEL

    @property
    def quantity(self) -> float:
        """Raw smallest-unit quantity; `decimals` is not applied."""
        return _parse_amount(self.amount)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "TokenHolding":
        mint = str(data.get("mint") or "").strip()
        if not mint:
            raise ValueError("token holding is missing a mint")
        amount = str(data.get("amount", "")).strip()
        _parse_amount(amount)
        decimals = data.get("decimals", 0)
        if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
            raise ValueError(f"token {mint} has invalid decimals: {decimals!r}")
        symbol = data.get("symbol") or None
        return cls(mint=mint, amount=amount, decimals=decimals, symbol=symbol)

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "mint": self.mint,
            "amount": self.amount,
            "decimals": self.decimals,
        }
        if self.symbol:
            out["symbol"] = self.symbol
        return out


@dataclass(frozen=True)
class PortfolioSnapshot:
    balance: float = 0.0
    tokens: tuple[TokenHolding, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.balance < 0:
            raise ValueError(f"balance is negative: {self.balance!r}")
        seen: set[str] = set()
        for token in self.tokens:
            if token.mint in seen:
                raise ValueError(f"duplicate mint in snapshot: {token.mint}")
            seen.add(token.mint)

    @classmethod
    def empty(cls) -> "PortfolioSnapshot":
        return cls()

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "PortfolioSnapshot":
        """Build a snapshot from the `{balance, tokens}` mapping a ledger returns.

        Raises ValueError when the payload breaks a snapshot invariant
        (negative balance, bad amount, duplicate mint).
        """
        raw_balance = data.get("balance", 0)
        try:
            balance = float(raw_balance)
        except (TypeError, ValueError):
            raise ValueError(f"balance is not numeric: {raw_balance!r}") from None
        if math.isnan(balance) or not math.isfinite(balance):
            raise ValueError(f"balance is not finite: {raw_balance!r}")
        tokens = tuple(TokenHolding.from_payload(item) for item in data.get("tokens") or ())
        return cls(balance=balance, tokens=tokens)

    def to_payload(self) -> dict[str, Any]:
        return {
            "balance": self.balance,
            "tokens": [token.to_payload() for token in self.tokens],
        }

    @property
    def total_value(self) -> float:
        # Raw smallest-unit amounts summed across mints, no price or decimals applied.
        return sum((token.quantity for token in self.tokens), 0.0)
