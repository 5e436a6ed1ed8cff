"""UI package (portfolio dashboard TUI)."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .app import PortfolioApp as PortfolioApp

__all__ = ["PortfolioApp"]


def __getattr__(name: str):
    if name == "PortfolioApp":
        from .app import PortfolioApp

        return PortfolioApp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
