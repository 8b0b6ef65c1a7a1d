"""Ledger protocol - append-only, totally ordered entry log.

Implementations: FilesystemLedger (local node), HTTPLedgerClient (RPC).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chessledger.models import LedgerEntry, Verdict
from chessledger.signer import Signer


@runtime_checkable
class Ledger(Protocol):
    """Abstract interface for reading/appending ledger entries."""

    async def count(self) -> int:
        """Current number of entries. A snapshot; may grow at any time."""
        ...

    async def read_at(self, index: int) -> LedgerEntry:
        """Fetch the entry at ``index`` (0-based)."""
        ...

    async def append(self, verdict: Verdict, cid: str, signer: Signer) -> int:
        """Submit a signed append. Returns the index assigned by the ledger.

        Fails with SignatureRejected, NetworkError or WriteTimeout.
        """
        ...


__all__ = ["Ledger"]
