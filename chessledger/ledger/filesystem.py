"""Filesystem-backed append-only ledger.

One JSON object per line in {data_dir}/ledger/entries.jsonl. The line
number is the entry index. Lines are only ever appended (and fsynced
before the append returns). Committed lines are never rewritten; a
line whose write fails is truncated away before the error surfaces.

The node process owns the file: entries are loaded once at startup and
appends are serialized through an asyncio lock, which gives every append a
single global order.
"""

from __future__ import annotations

import asyncio
import json
import os
import time
from pathlib import Path
from typing import Callable

import bittensor as bt
from pydantic import ValidationError

from chessledger.determinism import canonical_json
from chessledger.errors import IndexOutOfRange, LedgerUnavailable, NetworkError, SignatureRejected
from chessledger.models import LedgerEntry, SignedAppend, Verdict
from chessledger.signer import Signer, sign_append, verify_append


class FilesystemLedger:
    """Local append-only Ledger implementation."""

    def __init__(
        self,
        data_dir: str,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(data_dir) / "ledger" / "entries.jsonl"
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._entries: list[LedgerEntry] = []
        self._nonces: set[str] = set()
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return

        with open(self.path, encoding="utf-8") as f:
            for lineno, line in enumerate(f):
                if not line.strip():
                    continue
                try:
                    record = json.loads(line)
                    entry = LedgerEntry.model_validate(record)
                except (json.JSONDecodeError, ValidationError) as e:
                    raise LedgerUnavailable(f"corrupt ledger line {lineno}: {e}") from e
                if entry.index != len(self._entries):
                    raise LedgerUnavailable(
                        f"ledger line {lineno} has index {entry.index}, expected {len(self._entries)}"
                    )
                self._entries.append(entry)
                if record.get("nonce"):
                    self._nonces.add(record["nonce"])

        bt.logging.info({"ledger": {"status": "loaded", "entries": len(self._entries)}})

    def _write_line(self, record: dict) -> None:
        """Append one line durably, or leave the file as it was."""
        line = canonical_json(record) + b"\n"
        fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        try:
            start = os.fstat(fd).st_size
            try:
                view = memoryview(line)
                while view:
                    written = os.write(fd, view)
                    view = view[written:]
                os.fsync(fd)
            except OSError:
                os.ftruncate(fd, start)
                raise
        finally:
            os.close(fd)

    # -- Ledger interface --

    async def count(self) -> int:
        return len(self._entries)

    async def read_at(self, index: int) -> LedgerEntry:
        n = len(self._entries)
        if index < 0 or index >= n:
            raise IndexOutOfRange(index, n)
        return self._entries[index]

    async def append(self, verdict: Verdict, cid: str, signer: Signer) -> int:
        try:
            return await self.commit(sign_append(verdict, cid, signer))
        except LedgerUnavailable as e:
            # Append callers see the same failure family as over RPC
            raise NetworkError(e.message) from e

    # -- Node side --

    async def commit(self, call: SignedAppend) -> int:
        """Verify and durably append a signed call. Returns its index.

        Raises SignatureRejected, or LedgerUnavailable when the line cannot
        be written; a failed write leaves no trace in the log.
        """
        if not verify_append(call):
            bt.logging.warning({"ledger": {"event": "append_rejected", "submitter": call.submitter[:16], "reason": "bad_signature"}})
            raise SignatureRejected("signature does not match submitter")

        async with self._lock:
            if call.nonce in self._nonces:
                bt.logging.warning({"ledger": {"event": "append_rejected", "submitter": call.submitter[:16], "reason": "replayed_nonce"}})
                raise SignatureRejected("nonce already used")

            entry = LedgerEntry(
                index=len(self._entries),
                verdict=call.verdict,
                cid=call.cid,
                timestamp=int(self._clock()),
                submitter=call.submitter,
            )
            record = entry.model_dump(mode="json")
            record.update(nonce=call.nonce, signature=call.signature)
            try:
                self._write_line(record)
            except OSError as e:
                bt.logging.error({"ledger": {"event": "append_failed", "index": entry.index, "error": str(e)}})
                raise LedgerUnavailable(f"append failed: {e}") from e

            self._entries.append(entry)
            self._nonces.add(call.nonce)

        bt.logging.info({"ledger": {"event": "append", "index": entry.index, "verdict": entry.verdict.value, "cid": entry.cid}})
        return entry.index


__all__ = ["FilesystemLedger"]
