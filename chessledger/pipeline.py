"""Recording pipeline: classify, upload, commit.

One submission runs IDLE -> ANALYZING -> UPLOADING -> COMMITTING -> DONE,
and any stage may end in FAILED. The first failure halts the run. There is
no compensation: if the ledger append fails after the upload, the stored
content is left orphaned and its CID is reported on the result so the
operator can resubmit.
"""

from __future__ import annotations

import inspect
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import bittensor as bt

from chessledger.classifier import classify_transcript
from chessledger.errors import (
    ChessLedgerError,
    ContentStoreError,
    LedgerError,
    ParseError,
    SubmissionInProgress,
)
from chessledger.ledger.interface import Ledger
from chessledger.models import RecordPayload, Transcript, Verdict
from chessledger.signer import Signer
from chessledger.store.interface import ContentStore
from chessledger.transcript import parse_pgn


class PipelineState(str, Enum):
    IDLE = "IDLE"
    ANALYZING = "ANALYZING"
    UPLOADING = "UPLOADING"
    COMMITTING = "COMMITTING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass
class SubmissionResult:
    """Outcome of one submission, updated in place as stages complete."""

    state: PipelineState = PipelineState.IDLE
    verdict: Verdict | None = None
    cid: str | None = None
    index: int | None = None
    error: ChessLedgerError | None = None
    failed_stage: PipelineState | None = None

    @property
    def ok(self) -> bool:
        return self.state is PipelineState.DONE

    @property
    def reason(self) -> str:
        return self.error.describe() if self.error else ""

    @property
    def orphaned_cid(self) -> str | None:
        """CID stored off-chain but never committed to the ledger."""
        if self.failed_stage is PipelineState.COMMITTING:
            return self.cid
        return None

    def raise_for_state(self) -> None:
        if self.error is not None:
            raise self.error


Listener = Callable[[PipelineState, SubmissionResult], Any]


class RecordingPipeline:
    """Write path for a single signer. One submission in flight at a time."""

    def __init__(
        self,
        store: ContentStore,
        ledger: Ledger,
        signer: Signer,
        parser: Callable[[str], Transcript] = parse_pgn,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.ledger = ledger
        self.signer = signer
        self._parser = parser
        self._clock = clock
        self._listeners: list[Listener] = []
        self._in_flight = False
        self.last_result: SubmissionResult | None = None

    @property
    def state(self) -> PipelineState:
        if self.last_result is None:
            return PipelineState.IDLE
        return self.last_result.state

    @property
    def busy(self) -> bool:
        return self._in_flight

    def add_listener(self, callback: Listener) -> None:
        """Register ``callback(state, result)``; may be sync or async."""
        self._listeners.append(callback)

    async def _notify(self, result: SubmissionResult) -> None:
        for callback in self._listeners:
            try:
                ret = callback(result.state, result)
                if inspect.isawaitable(ret):
                    await ret
            except Exception as e:
                bt.logging.error({"pipeline_listener_error": str(e), "state": result.state.value})

    async def _enter(self, result: SubmissionResult, state: PipelineState) -> None:
        result.state = state
        bt.logging.info({"pipeline": {"state": state.value, "signer": self.signer.address[:16]}})
        await self._notify(result)

    async def _fail(self, result: SubmissionResult, error: ChessLedgerError) -> SubmissionResult:
        result.failed_stage = result.state
        result.error = error
        result.state = PipelineState.FAILED
        bt.logging.warning({
            "pipeline": {
                "state": PipelineState.FAILED.value,
                "stage": result.failed_stage.value,
                "error": error.describe(),
                "orphaned_cid": result.orphaned_cid,
            }
        })
        await self._notify(result)
        return result

    async def submit(self, text: str) -> SubmissionResult:
        """Run one transcript through classify, upload and commit.

        Stage failures end in a FAILED result rather than an exception.
        Raises SubmissionInProgress if called while a submission runs.
        """
        if self._in_flight:
            raise SubmissionInProgress("a submission is already in flight for this signer")
        self._in_flight = True

        result = SubmissionResult()
        self.last_result = result
        try:
            await self._enter(result, PipelineState.ANALYZING)
            try:
                transcript = self._parser(text)
            except ParseError as e:
                return await self._fail(result, e)
            result.verdict = classify_transcript(transcript)

            await self._enter(result, PipelineState.UPLOADING)
            payload = RecordPayload.from_transcript(
                transcript,
                verdict=result.verdict,
                timestamp=int(self._clock() * 1000),
                verifier=self.signer.address,
            )
            try:
                result.cid = await self.store.put(payload)
            except ContentStoreError as e:
                return await self._fail(result, e)

            await self._enter(result, PipelineState.COMMITTING)
            try:
                result.index = await self.ledger.append(result.verdict, result.cid, self.signer)
            except LedgerError as e:
                return await self._fail(result, e)

            result.state = PipelineState.DONE
            bt.logging.info({
                "pipeline": {
                    "state": PipelineState.DONE.value,
                    "verdict": result.verdict.value,
                    "cid": result.cid,
                    "index": result.index,
                }
            })
            await self._notify(result)
            return result
        finally:
            self._in_flight = False


__all__ = ["PipelineState", "RecordingPipeline", "SubmissionResult"]
