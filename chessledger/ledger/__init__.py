"""Append-only ledger of verdict pointers.

Each entry records a verdict and the CID of its full record in the
content store. Entries are addressed by position and never change.
"""

from .filesystem import FilesystemLedger
from .interface import Ledger
from .rpc_client import HTTPLedgerClient

__all__ = ["FilesystemLedger", "HTTPLedgerClient", "Ledger"]
