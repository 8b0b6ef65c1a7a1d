"""Deterministic transcript classification.

Rules, first match wins:
1. White is declared a program            -> AI_SUSPECTED
2. Fewer than 20 plies and not a draw     -> AI_SUSPECTED_TOO_FAST
3. Otherwise                              -> HUMAN_VERIFIED
"""

from __future__ import annotations

from typing import Mapping

from chessledger.models import Transcript, Verdict

MIN_HUMAN_PLIES = 20
DRAW_RESULT = "1/2-1/2"


def classify(headers: Mapping[str, str], ply_count: int) -> Verdict:
    if headers.get("WhiteType") == "Program":
        return Verdict.AI_SUSPECTED
    if ply_count < MIN_HUMAN_PLIES and headers.get("Result") != DRAW_RESULT:
        return Verdict.AI_SUSPECTED_TOO_FAST
    return Verdict.HUMAN_VERIFIED


def classify_transcript(transcript: Transcript) -> Verdict:
    return classify(transcript.headers, transcript.ply_count)


__all__ = ["DRAW_RESULT", "MIN_HUMAN_PLIES", "classify", "classify_transcript"]
