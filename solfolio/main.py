"""Entrypoint for the portfolio dashboard."""
from __future__ import annotations

import argparse
import dataclasses
import logging

from .config import SOURCES, WalletConfig, load_config
from .ui import PortfolioApp


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Solana wallet portfolio dashboard")
    parser.add_argument("--account", help="Wallet address to connect on start")
    parser.add_argument("--cluster", help="Cluster label (mainnet-beta, devnet, testnet, localnet)")
    parser.add_argument("--rpc-url", help="Custom JSON-RPC endpoint (overrides the cluster default)")
    parser.add_argument("--source", choices=SOURCES, help="Ledger data source")
    return parser.parse_args(argv)


def _apply_overrides(config: WalletConfig, args: argparse.Namespace) -> WalletConfig:
    overrides = {
        "account": args.account,
        "cluster": args.cluster,
        "rpc_url": args.rpc_url,
        "source": args.source,
    }
    return dataclasses.replace(config, **{k: v.strip() for k, v in overrides.items() if v and v.strip()})


def _setup_logging(config: WalletConfig) -> None:
    # The TUI owns the terminal; only log when a file is configured.
    if not config.log_file:
        return
    logging.basicConfig(
        filename=config.log_file,
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def main(argv: list[str] | None = None) -> None:
    config = _apply_overrides(load_config(), _parse_args(argv))
    _setup_logging(config)
    PortfolioApp(config).run()


if __name__ == "__main__":
    main()
