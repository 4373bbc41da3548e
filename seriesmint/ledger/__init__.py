"""Replay protection for mint requests."""

from .mint_ledger import MintLedger, fingerprint

__all__ = ["MintLedger", "fingerprint"]
