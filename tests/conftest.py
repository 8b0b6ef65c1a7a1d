"""Shared fixtures: deterministic keypairs, temp dirs and PGN builders."""

from __future__ import annotations

import os
import tempfile

import pytest

os.environ.setdefault("CHESSLEDGER_TEST_MODE", "true")

# Four-ply knight shuffle: always legal, never ends the game.
_SHUFFLE = ["Nf3", "Nf6", "Ng1", "Ng8"]


def make_pgn(headers: dict[str, str] | None = None, plies: int = 40) -> str:
    """Build a legal PGN with the given headers and exactly ``plies`` plies."""
    headers = headers or {}
    lines = [f'[{key} "{value}"]' for key, value in headers.items()]
    tokens = []
    for i in range(plies):
        if i % 2 == 0:
            tokens.append(f"{i // 2 + 1}.")
        tokens.append(_SHUFFLE[i % len(_SHUFFLE)])
    tokens.append(headers.get("Result", "*"))
    return "\n".join(lines) + "\n\n" + " ".join(tokens) + "\n"


@pytest.fixture
def pgn_factory():
    return make_pgn


@pytest.fixture
def signer():
    import bittensor as bt
    from chessledger.signer import Signer
    return Signer(bt.Keypair.create_from_uri("//Alice"))


@pytest.fixture
def other_signer():
    import bittensor as bt
    from chessledger.signer import Signer
    return Signer(bt.Keypair.create_from_uri("//Bob"))


@pytest.fixture
def tmp_dir():
    with tempfile.TemporaryDirectory() as d:
        yield d
