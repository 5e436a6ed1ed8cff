"""Portfolio state manager.

Owns the current snapshot plus the loading/error flags, runs refreshes against
a ledger source, and tells subscribers whenever any of that changes. Views
read from here and re-derive what they display; nothing is pushed into them.
"""
from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from .identity import WalletSession
from .models import PortfolioSnapshot, TokenHolding
from .sources import LedgerSource

logger = logging.getLogger(__name__)

FETCH_ERROR_MESSAGE = "Failed to load portfolio data"

StateListener = Callable[["PortfolioState"], None]


class PortfolioState:
    def __init__(self, source: LedgerSource) -> None:
        self._source = source
        self._snapshot = PortfolioSnapshot.empty()
        self._is_loading = False
        self._error: str | None = None
        self._updated_at: datetime | None = None
        self._listeners: list[StateListener] = []
        self._seq = 0
        self._tasks: set[asyncio.Task] = set()
        self._unbind: Callable[[], None] | None = None

    @property
    def snapshot(self) -> PortfolioSnapshot:
        return self._snapshot

    @property
    def balance(self) -> float:
        return self._snapshot.balance

    @property
    def tokens(self) -> tuple[TokenHolding, ...]:
        return self._snapshot.tokens

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def updated_at(self) -> datetime | None:
        return self._updated_at

    # region Observers
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("portfolio state listener %r failed", listener)
    # endregion

    # region Refresh
    async def refresh(self, account: str | None) -> None:
        """Fetch a fresh snapshot for `account`.

        No-op without an account. Failures keep the previous snapshot and set
        `error`; they are never raised to the caller. Only the most recently
        started refresh may change state, so an older request that resolves
        late cannot overwrite newer data or clear the loading flag early.
        """
        if not account:
            return
        self._seq += 1
        seq = self._seq
        self._is_loading = True
        self._notify()
        try:
            snapshot = await self._source.fetch(account)
        except Exception:
            if seq != self._seq:
                logger.info("dropping failed refresh #%d for %s (superseded by #%d)", seq, account, self._seq)
                return
            logger.warning("portfolio refresh #%d for %s failed", seq, account, exc_info=True)
            self._error = FETCH_ERROR_MESSAGE
        else:
            if seq != self._seq:
                logger.info("dropping refresh #%d for %s (superseded by #%d)", seq, account, self._seq)
                return
            self._snapshot = snapshot
            self._error = None
            self._updated_at = datetime.now(timezone.utc)
            logger.info(
                "portfolio refreshed for %s: balance=%s tokens=%d",
                account,
                snapshot.balance,
                len(snapshot.tokens),
            )
        finally:
            if seq == self._seq:
                self._is_loading = False
                self._notify()

    def request_refresh(self, account: str | None) -> asyncio.Task | None:
        """Manual refresh; refused while another refresh is outstanding."""
        if self._is_loading:
            return None
        return self._schedule(account)

    def _schedule(self, account: str | None) -> asyncio.Task | None:
        if not account:
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("no running loop; refresh for %s not scheduled", account)
            return None
        task = loop.create_task(self.refresh(account))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_for_pending(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def cancel_pending(self) -> None:
        """Cancel scheduled refreshes and wait for them to unwind."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.debug("cancelled %d pending refresh(es)", len(tasks))
    # endregion

    # region Wallet binding
    def bind(self, session: WalletSession) -> None:
        """Refresh automatically whenever the session gains or switches account."""
        self.unbind()

        def _on_account(_previous: str | None, current: str | None) -> None:
            if current:
                self._schedule(current)

        self._unbind = session.subscribe(_on_account)
        if session.account:
            self._schedule(session.account)

    def unbind(self) -> None:
        if self._unbind is not None:
            self._unbind()
            self._unbind = None
    # endregion

    # region Derived values
    def total_value(self) -> float:
        return self._snapshot.total_value

    @staticmethod
    def format_balance(balance: float) -> str:
        return f"{balance:.2f}"

    @staticmethod
    def format_total(value: float) -> str:
        return f"${value:.2f} USD"
    # endregion
