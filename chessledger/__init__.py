"""Chess transcript verification with a two-tier provenance record.

Games are classified deterministically, the full record is written to a
content-addressed store, and a signed pointer (verdict + CID) is appended
to an append-only ledger. History is rebuilt by joining the two.
"""

from .classifier import classify, classify_transcript
from .errors import ChessLedgerError
from .history import HistoryReconciler
from .models import HistoryItem, LedgerEntry, RecordPayload, Transcript, Verdict
from .pipeline import PipelineState, RecordingPipeline, SubmissionResult
from .signer import Signer, load_signer
from .transcript import parse_pgn

__version__ = "0.1.0"

__all__ = [
    "ChessLedgerError",
    "HistoryItem",
    "HistoryReconciler",
    "LedgerEntry",
    "PipelineState",
    "RecordPayload",
    "RecordingPipeline",
    "Signer",
    "SubmissionResult",
    "Transcript",
    "Verdict",
    "classify",
    "classify_transcript",
    "load_signer",
    "parse_pgn",
]
