"""PGN parser boundary backed by python-chess."""

from __future__ import annotations

import io

import chess.pgn

from chessledger.errors import ParseError
from chessledger.models import Transcript


def parse_pgn(text: str) -> Transcript:
    """Parse a single PGN game into headers and mainline ply count.

    python-chess is lenient and records problems on ``game.errors``
    instead of raising; any recorded error rejects the transcript.
    """
    if not text or not text.strip():
        raise ParseError("empty transcript")

    try:
        game = chess.pgn.read_game(io.StringIO(text))
    except (ValueError, UnicodeError) as e:
        raise ParseError(str(e)) from e

    if game is None:
        raise ParseError("no game found in transcript")
    if game.errors:
        raise ParseError(str(game.errors[0]))

    return Transcript(
        text=text,
        headers={str(k): str(v) for k, v in game.headers.items()},
        ply_count=sum(1 for _ in game.mainline_moves()),
    )


__all__ = ["parse_pgn"]
