"""Portfolio dashboard TUI."""

from __future__ import annotations

from typing import Callable

from textual.app import App, ComposeResult
from textual.containers import Horizontal
from textual.widgets import DataTable, Footer, Header, Static

from ..config import WalletConfig, load_config
from ..identity import WalletSession, cluster_for
from ..sources import LedgerSource, build_source
from ..state import PortfolioState
from .common import (
    CONNECT_REQUIRED_TEXT,
    NO_TOKENS_TEXT,
    TOKEN_COLUMNS,
    _balance_text,
    _error_text,
    _status_line,
    _token_row,
    _total_text,
)


# region Portfolio UI
class PortfolioApp(App):
    TITLE = "My Portfolio Dashboard for Cryptocurrency Assets"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("r", "refresh", "Refresh"),
        ("c", "toggle_connection", "Connect"),
        ("j", "cursor_down", "Down"),
        ("k", "cursor_up", "Up"),
    ]

    CSS = """
    Screen {
        layout: vertical;
    }

    #error {
        height: auto;
        padding: 0 1;
    }

    #connect {
        height: auto;
        padding: 1 2;
        border: heavy #b58900;
        color: #d7d7af;
    }

    #panels {
        height: 1fr;
    }

    #balance, #total {
        width: 1fr;
        height: 1fr;
        padding: 0 1;
        border: solid #003054;
    }

    #tokens {
        width: 2fr;
        height: 1fr;
        border: solid #003054;
    }

    #tokens:focus {
        border: solid #2c82c9;
    }

    #tokens > .datatable--cursor {
        background: #1c3348;
    }

    #status {
        height: 1;
        padding: 0 1;
    }
    """

    def __init__(
        self,
        config: WalletConfig | None = None,
        *,
        source: LedgerSource | None = None,
        session: WalletSession | None = None,
    ) -> None:
        super().__init__()
        self._config = config or load_config()
        cluster = cluster_for(self._config.cluster, self._config.rpc_url)
        self._wallet = session or WalletSession(cluster, self._config.account)
        self._ledger = source or build_source(self._config, self._wallet.cluster)
        self._portfolio = PortfolioState(self._ledger)
        self._unsubscribe: list[Callable[[], None]] = []

    @property
    def portfolio(self) -> PortfolioState:
        return self._portfolio

    @property
    def wallet(self) -> WalletSession:
        return self._wallet

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static("", id="error")
        yield Static(CONNECT_REQUIRED_TEXT, id="connect")
        with Horizontal(id="panels"):
            yield Static("", id="balance")
            yield DataTable(id="tokens", zebra_stripes=True)
            yield Static("", id="total")
        yield Static("Starting...", id="status")
        yield Footer()

    async def on_mount(self) -> None:
        self._error_banner = self.query_one("#error", Static)
        self._connect_banner = self.query_one("#connect", Static)
        self._panels = self.query_one("#panels", Horizontal)
        self._balance = self.query_one("#balance", Static)
        self._table = self.query_one("#tokens", DataTable)
        self._total = self.query_one("#total", Static)
        self._status = self.query_one("#status", Static)
        self._balance.border_title = "SOL Balance Information"
        self._table.border_title = "Token Holdings & Assets"
        self._total.border_title = "Total Portfolio Value"
        self._table.add_columns(*TOKEN_COLUMNS)
        self._table.cursor_type = "row"
        self._table.focus()
        self._unsubscribe.append(self._portfolio.subscribe(self._on_state_change))
        self._unsubscribe.append(self._wallet.subscribe(self._on_account_change))
        self._portfolio.bind(self._wallet)
        self._render_all()

    async def on_unmount(self) -> None:
        self._portfolio.unbind()
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []
        await self._portfolio.cancel_pending()
        close = getattr(self._ledger, "close", None)
        if close is not None:
            await close()

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if action == "refresh" and (self._portfolio.is_loading or not self._wallet.connected):
            return None
        return super().check_action(action, parameters)

    def action_refresh(self) -> None:
        self._portfolio.request_refresh(self._wallet.account)

    def action_toggle_connection(self) -> None:
        if self._wallet.connected:
            self._wallet.disconnect()
            return
        if not self._config.account:
            self._status.update("No account configured: set SOLFOLIO_ACCOUNT or pass --account")
            return
        self._wallet.connect(self._config.account)

    def action_cursor_down(self) -> None:
        self._table.action_cursor_down()

    def action_cursor_up(self) -> None:
        self._table.action_cursor_up()

    def _on_state_change(self, _state: PortfolioState) -> None:
        self._render_all()

    def _on_account_change(self, _previous: str | None, _current: str | None) -> None:
        self._render_all()

    def _render_all(self) -> None:
        state = self._portfolio
        connected = self._wallet.connected
        self._error_banner.update(_error_text(state.error))
        self._error_banner.display = bool(state.error)
        self._connect_banner.display = not connected
        self._panels.display = connected
        self._balance.update(
            _balance_text(state.balance, self._wallet.cluster.label, loading=state.is_loading)
        )
        self._render_tokens()
        self._total.update(_total_text(state.total_value()))
        self._status.update(
            _status_line(
                self._wallet.account,
                self._wallet.cluster.label,
                loading=state.is_loading,
                updated_at=state.updated_at,
            )
        )
        self.refresh_bindings()

    def _render_tokens(self) -> None:
        self._table.clear()
        tokens = self._portfolio.tokens
        if not tokens:
            self._table.add_row(NO_TOKENS_TEXT, "", "", key="empty")
            return
        for token in tokens:
            self._table.add_row(*_token_row(token), key=token.mint)
# endregion
