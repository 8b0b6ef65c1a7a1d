"""Pydantic models shared by the recording and history paths.

Two storage tiers:
- RecordPayload: full transcript + verdict, stored off-chain under its CID
- LedgerEntry: compact pointer (verdict, cid, timestamp) appended to the ledger

HistoryItem is the read-side join of the two.
"""

from __future__ import annotations

import json
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from chessledger.determinism import canonical_json
from chessledger.errors import DecodeError

UNKNOWN = "unknown"


# ---------------------------------------------------------------------------
# Verdict
# ---------------------------------------------------------------------------


class Verdict(str, Enum):
    """Closed set of classification labels."""

    AI_SUSPECTED = "AI_SUSPECTED"
    AI_SUSPECTED_TOO_FAST = "AI_SUSPECTED_TOO_FAST"
    HUMAN_VERIFIED = "HUMAN_VERIFIED"

    @property
    def label(self) -> str:
        return _VERDICT_LABELS[self]


_VERDICT_LABELS = {
    Verdict.AI_SUSPECTED: "AI Suspected",
    Verdict.AI_SUSPECTED_TOO_FAST: "AI Suspected (Too Fast)",
    Verdict.HUMAN_VERIFIED: "Human Verified",
}


# ---------------------------------------------------------------------------
# Transcript (parser output)
# ---------------------------------------------------------------------------


class Transcript(BaseModel):
    """Parsed game: raw text plus header map and ply count."""

    model_config = ConfigDict(frozen=True)

    text: str
    headers: dict[str, str] = Field(default_factory=dict)
    ply_count: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Off-chain record
# ---------------------------------------------------------------------------


class RecordPayload(BaseModel):
    """Content written once to the content store per submission.

    Identity is the CID of ``to_bytes()``; there is no separate key.
    """

    model_config = ConfigDict(frozen=True)

    verdict: Verdict
    pgn: str
    white: str = "?"
    black: str = "?"
    result: str = "*"
    timestamp: int = Field(ge=0, description="milliseconds since the Unix epoch")
    verifier: str = Field(min_length=1, description="submitter address")

    @classmethod
    def from_transcript(
        cls,
        transcript: Transcript,
        verdict: Verdict,
        timestamp: int,
        verifier: str,
    ) -> RecordPayload:
        headers = transcript.headers
        return cls(
            verdict=verdict,
            pgn=transcript.text,
            white=headers.get("White", "?"),
            black=headers.get("Black", "?"),
            result=headers.get("Result", "*"),
            timestamp=timestamp,
            verifier=verifier,
        )

    def to_bytes(self) -> bytes:
        """Canonical byte encoding (sorted-key compact UTF-8 JSON)."""
        return canonical_json(self.model_dump(mode="json"))

    @classmethod
    def from_bytes(cls, raw: bytes) -> RecordPayload:
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"content is not JSON: {e}") from e
        if not isinstance(data, dict):
            raise DecodeError("content is not a JSON object")
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DecodeError(f"content is not a record payload: {e.error_count()} errors") from e


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------


class SignedAppend(BaseModel):
    """Authenticated append call. The signature covers every other field."""

    verdict: Verdict
    cid: str = Field(min_length=1)
    submitter: str = Field(min_length=1)
    nonce: str = Field(min_length=16)
    signature: str = ""


class LedgerEntry(BaseModel):
    """One committed ledger record, addressed by its position."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    verdict: Verdict
    cid: str
    timestamp: int = Field(ge=0, description="seconds since the Unix epoch, set at commit")
    submitter: str = ""


# ---------------------------------------------------------------------------
# Joined history
# ---------------------------------------------------------------------------


class HistoryItem(BaseModel):
    """Ledger entry joined with its off-chain payload.

    Payload-derived fields fall back to ``UNKNOWN`` when the content fetch
    fails; ledger-derived fields are always real.
    """

    index: int
    verdict: Verdict
    cid: str
    timestamp: int
    submitter: str = ""

    white: str = UNKNOWN
    black: str = UNKNOWN
    result: str = UNKNOWN
    pgn: str = UNKNOWN
    verifier: str = UNKNOWN
    payload_timestamp: int | None = None

    content_available: bool = False
    content_error: str | None = None
    gateway_url: str | None = None

    @classmethod
    def join(
        cls,
        entry: LedgerEntry,
        payload: RecordPayload | None,
        content_error: str | None = None,
        gateway_url: str | None = None,
    ) -> HistoryItem:
        fields = entry.model_dump()
        if payload is not None:
            fields.update(
                white=payload.white,
                black=payload.black,
                result=payload.result,
                pgn=payload.pgn,
                verifier=payload.verifier,
                payload_timestamp=payload.timestamp,
                content_available=True,
            )
        return cls(**fields, content_error=content_error, gateway_url=gateway_url)


__all__ = [
    "UNKNOWN",
    "HistoryItem",
    "LedgerEntry",
    "RecordPayload",
    "SignedAppend",
    "Transcript",
    "Verdict",
]
