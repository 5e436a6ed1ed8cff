"""Solana wallet portfolio dashboard."""
