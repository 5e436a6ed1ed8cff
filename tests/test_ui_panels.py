from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

from solfolio.identity import WalletSession, cluster_for
from solfolio.models import PortfolioSnapshot, TokenHolding
from solfolio.state import PortfolioState
from solfolio.ui.app import PortfolioApp
from solfolio.ui.common import (
    LOADING_BALANCE_TEXT,
    NO_TOKENS_TEXT,
    _balance_text,
    _error_text,
    _status_line,
    _token_row,
    _total_text,
)


class _TableStub:
    def __init__(self) -> None:
        self.rows: list[tuple[tuple[object, ...], str | None]] = []

    def clear(self) -> None:
        self.rows = []

    def add_row(self, *cells: object, key: str | None = None) -> None:
        self.rows.append((cells, key))


class _StatusStub:
    def __init__(self) -> None:
        self.text = ""

    def update(self, text: str) -> None:
        self.text = text


def test_balance_panel_shows_two_decimals_and_network() -> None:
    text = _balance_text(2500000000, "devnet", loading=False)

    assert text.plain == "2500000000.00 SOL\nCurrent Network: devnet"


def test_balance_panel_shows_loading_placeholder() -> None:
    assert _balance_text(12.0, "devnet", loading=True).plain == LOADING_BALANCE_TEXT


def test_token_row_uses_unknown_label_and_raw_amount() -> None:
    row = _token_row(TokenHolding(mint="Mint9", amount="42", decimals=9))

    assert [cell.plain for cell in row] == ["Unknown Token", "Mint9", "42 tokens"]


def test_token_row_uses_symbol_when_present() -> None:
    row = _token_row(TokenHolding(mint="M1", amount="1000000", decimals=6, symbol="USDC"))

    assert row[0].plain == "USDC"
    assert row[2].plain == "1000000 tokens"


def test_total_panel_text() -> None:
    assert _total_text(1000000).plain == "$1000000.00 USD"


def test_error_banner_is_blank_without_error() -> None:
    assert _error_text(None).plain == ""
    assert _error_text("Failed to load portfolio data").plain == "Failed to load portfolio data"


def test_status_line_reports_wallet_and_refresh() -> None:
    ts = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    idle = _status_line("wallet-1", "devnet", loading=False, updated_at=None)
    busy = _status_line(None, "devnet", loading=True, updated_at=ts)

    assert idle == "devnet | wallet: wallet-1 | last update: n/a"
    assert busy.startswith("devnet | wallet: not connected | last update: ")
    assert busy.endswith(" | refreshing...")


def test_token_table_shows_placeholder_when_empty() -> None:
    table = _TableStub()
    fake_self = SimpleNamespace(_table=table, _portfolio=SimpleNamespace(tokens=()))

    PortfolioApp._render_tokens(fake_self)  # type: ignore[arg-type]

    assert table.rows == [((NO_TOKENS_TEXT, "", ""), "empty")]


def test_token_table_rows_are_keyed_by_mint_in_source_order() -> None:
    snapshot = PortfolioSnapshot.from_payload(
        {
            "balance": 1,
            "tokens": [
                {"mint": "M2", "amount": "5", "decimals": 0},
                {"mint": "M1", "amount": "9", "decimals": 0, "symbol": "ONE"},
            ],
        }
    )
    table = _TableStub()
    table.add_row("stale", key="old")
    fake_self = SimpleNamespace(_table=table, _portfolio=SimpleNamespace(tokens=snapshot.tokens))

    PortfolioApp._render_tokens(fake_self)  # type: ignore[arg-type]

    assert [key for _cells, key in table.rows] == ["M2", "M1"]


def test_refresh_binding_disabled_while_loading_or_disconnected() -> None:
    connected = WalletSession(cluster_for("devnet"), "wallet-1")
    loading = SimpleNamespace(_portfolio=SimpleNamespace(is_loading=True), _wallet=connected)
    offline = SimpleNamespace(
        _portfolio=SimpleNamespace(is_loading=False),
        _wallet=WalletSession(cluster_for("devnet")),
    )

    assert PortfolioApp.check_action(loading, "refresh", ()) is None  # type: ignore[arg-type]
    assert PortfolioApp.check_action(offline, "refresh", ()) is None  # type: ignore[arg-type]


def test_toggle_connection_uses_configured_account() -> None:
    session = WalletSession(cluster_for("devnet"))
    fake_self = SimpleNamespace(
        _wallet=session,
        _config=SimpleNamespace(account="wallet-1"),
        _status=_StatusStub(),
    )

    PortfolioApp.action_toggle_connection(fake_self)  # type: ignore[arg-type]
    assert session.account == "wallet-1"

    PortfolioApp.action_toggle_connection(fake_self)  # type: ignore[arg-type]
    assert session.account is None


def test_toggle_connection_without_configured_account_reports_status() -> None:
    session = WalletSession(cluster_for("devnet"))
    status = _StatusStub()
    fake_self = SimpleNamespace(_wallet=session, _config=SimpleNamespace(account=None), _status=status)

    PortfolioApp.action_toggle_connection(fake_self)  # type: ignore[arg-type]

    assert session.account is None
    assert "SOLFOLIO_ACCOUNT" in status.text


def test_unmount_cancels_refreshes_before_closing_the_ledger() -> None:
    events: list[str] = []

    class _SlowLedger:
        async def fetch(self, account: str) -> PortfolioSnapshot:
            await asyncio.sleep(3600)
            return PortfolioSnapshot.empty()

        async def close(self) -> None:
            events.append(f"close pending={len(state._tasks)}")

    async def _run() -> None:
        session = WalletSession(cluster_for("devnet"), "wallet-1")
        fake_self = SimpleNamespace(
            _portfolio=state,
            _wallet=session,
            _ledger=ledger,
            _unsubscribe=[state.subscribe(lambda s: events.append("render"))],
        )
        state.bind(session)
        await asyncio.sleep(0)
        assert state.is_loading is True

        await PortfolioApp.on_unmount(fake_self)  # type: ignore[arg-type]

        assert fake_self._unsubscribe == []

    ledger = _SlowLedger()
    state = PortfolioState(ledger)
    asyncio.run(_run())

    assert events == ["render", "close pending=0"]
    assert state.is_loading is False
