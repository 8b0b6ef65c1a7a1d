"""Error taxonomy for the recording and history paths.

Every failure the core reports derives from ChessLedgerError so callers can
display ``kind`` plus the underlying message without knowing which tier
(parser, signer, content store, ledger) produced it.
"""

from __future__ import annotations


class ChessLedgerError(Exception):
    """Base exception for all chessledger errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    @property
    def kind(self) -> str:
        return type(self).__name__

    def describe(self) -> str:
        """Human-readable ``Kind: message`` string."""
        if not self.message:
            return self.kind
        return f"{self.kind}: {self.message}"


# -- Boundary errors --


class ParseError(ChessLedgerError):
    """Transcript text could not be parsed as a game."""


class InvalidKey(ChessLedgerError):
    """Key material does not decode to a usable keypair."""


# -- Content store --


class ContentStoreError(ChessLedgerError):
    """Base class for content store failures."""


class StoreUnavailable(ContentStoreError):
    """Transport or service error talking to the content store."""


class StoreRejected(ContentStoreError):
    """The content store answered with a non-success status."""

    def __init__(self, message: str = "", status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class NotFound(ContentStoreError):
    """No content is stored under the requested CID."""


class DecodeError(ContentStoreError):
    """Stored bytes are not a valid encoded record payload."""


# -- Ledger --


class LedgerError(ChessLedgerError):
    """Base class for ledger failures."""


class SignatureRejected(LedgerError):
    """The ledger refused the signed append."""


class NetworkError(LedgerError):
    """Transport failure while submitting an append."""


class WriteTimeout(LedgerError):
    """The append was not confirmed within the transport timeout."""


class IndexOutOfRange(LedgerError):
    """Requested index is outside ``[0, count())``."""

    def __init__(self, index: int, count: int | None = None) -> None:
        if count is None:
            message = f"index {index} out of range"
        else:
            message = f"index {index} out of range for ledger of {count} entries"
        super().__init__(message)
        self.index = index
        self.count = count


class LedgerUnavailable(LedgerError):
    """The ledger could not be read."""


# -- Pipeline --


class SubmissionInProgress(ChessLedgerError):
    """A submission is already in flight on this pipeline instance."""


__all__ = [
    "ChessLedgerError",
    "ContentStoreError",
    "DecodeError",
    "IndexOutOfRange",
    "InvalidKey",
    "LedgerError",
    "LedgerUnavailable",
    "NetworkError",
    "NotFound",
    "ParseError",
    "SignatureRejected",
    "StoreRejected",
    "StoreUnavailable",
    "SubmissionInProgress",
    "WriteTimeout",
]
