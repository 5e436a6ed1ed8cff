"""Shared UI helpers.

Pure formatting helpers for the dashboard panels. Keep them free of state
and wallet side effects so they can be tested on their own.
"""

from __future__ import annotations

from datetime import datetime

from rich.text import Text

from ..models import TokenHolding
from ..state import PortfolioState

CONNECT_REQUIRED_TEXT = (
    "WALLET CONNECTION REQUIRED - Please connect your Solana wallet "
    "to view your cryptocurrency portfolio"
)
LOADING_BALANCE_TEXT = "Loading your balance..."
NO_TOKENS_TEXT = "No tokens found in wallet"

TOKEN_COLUMNS = ("Token", "Mint", "Amount")


# region Formatting Helpers
def _balance_text(balance: float, cluster_label: str, *, loading: bool) -> Text:
    if loading:
        return Text(LOADING_BALANCE_TEXT, style="italic")
    text = Text(f"{PortfolioState.format_balance(balance)} SOL", style="bold")
    text.append("\n")
    text.append(f"Current Network: {cluster_label}", style="grey58")
    return text


def _token_row(token: TokenHolding) -> list[Text]:
    label_style = "bold" if token.symbol else "bold grey58"
    return [
        Text(token.label, style=label_style),
        Text(token.mint, style="grey50"),
        Text(f"{token.amount} tokens", justify="right"),
    ]


def _total_text(value: float) -> Text:
    return Text(PortfolioState.format_total(value), style="bold")


def _error_text(error: str | None) -> Text:
    if not error:
        return Text("")
    return Text(error, style="bold #ffd7d7 on #5f1f1f")
# endregion


def _status_line(
    account: str | None,
    cluster_label: str,
    *,
    loading: bool,
    updated_at: datetime | None,
) -> str:
    if updated_at:
        ts = updated_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    else:
        ts = "n/a"
    wallet = account or "not connected"
    base = f"{cluster_label} | wallet: {wallet} | last update: {ts}"
    if loading:
        return f"{base} | refreshing..."
    return base
