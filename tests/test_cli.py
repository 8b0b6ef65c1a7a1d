"""Tests for the command line glue."""

import asyncio
from pathlib import Path

import pytest

from chessledger.config import LedgerSettings, Settings, StoreSettings
from chessledger.entrypoints.cli import _submit, main
from chessledger.ledger.filesystem import FilesystemLedger
from chessledger.ledger.rpc_server import LedgerRPCServer
from chessledger.store.filesystem import FilesystemContentStore
from chessledger.store.http_server import ContentStoreHTTPServer


def _write(tmp_dir: str, name: str, text: str) -> str:
    path = Path(tmp_dir) / name
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_classify(tmp_dir, pgn_factory, capsys):
    pgn = _write(tmp_dir, "game.pgn", pgn_factory({"Result": "1-0"}, plies=35))
    assert main(["classify", pgn]) == 0
    out = capsys.readouterr().out
    assert "HUMAN_VERIFIED" in out
    assert "35 plies" in out


def test_classify_bad_pgn(tmp_dir, capsys):
    pgn = _write(tmp_dir, "bad.pgn", "1. e4 e5 2. Ke3 *")
    assert main(["classify", pgn]) == 1
    assert "ParseError" in capsys.readouterr().err


def test_submit_requires_key(tmp_dir, pgn_factory, capsys, monkeypatch):
    monkeypatch.delenv("CHESSLEDGER_WALLET__KEY_FILE", raising=False)
    pgn = _write(tmp_dir, "game.pgn", pgn_factory({"Result": "1-0"}, plies=35))
    assert main(["submit", pgn]) == 2
    assert "key file" in capsys.readouterr().err


def test_submit_rejects_invalid_key(tmp_dir, pgn_factory, capsys):
    pgn = _write(tmp_dir, "game.pgn", pgn_factory({"Result": "1-0"}, plies=35))
    key = _write(tmp_dir, "key.txt", "definitely not a key")
    assert main(["submit", "--key-file", key, pgn]) == 1
    assert "InvalidKey" in capsys.readouterr().err


def test_submit_reports_upload_failure(tmp_dir, pgn_factory, capsys, monkeypatch):
    # Nothing listens on either port: the upload fails first, so nothing is orphaned.
    monkeypatch.setenv("CHESSLEDGER_STORE__URL", "http://127.0.0.1:18971")
    monkeypatch.setenv("CHESSLEDGER_LEDGER__URL", "http://127.0.0.1:18972")
    pgn = _write(tmp_dir, "game.pgn", pgn_factory({"Result": "1-0"}, plies=35))
    key = _write(tmp_dir, "key.txt", "//Alice")
    assert main(["submit", "--key-file", key, pgn]) == 1
    err = capsys.readouterr().err
    assert "StoreUnavailable" in err
    assert "Orphaned CID" not in err


@pytest.mark.asyncio
async def test_submit_prints_refreshed_history(tmp_dir, pgn_factory, capsys):
    content_server = ContentStoreHTTPServer(
        FilesystemContentStore(tmp_dir), api_token="node-token", host="127.0.0.1", port=18973,
    )
    ledger_server = LedgerRPCServer(FilesystemLedger(tmp_dir), host="127.0.0.1", port=18974)
    settings = Settings(
        store=StoreSettings(url="http://127.0.0.1:18973", api_token="node-token", gateway_url=None, timeout=5.0),
        ledger=LedgerSettings(url="http://127.0.0.1:18974", timeout=5.0),
    )
    key = _write(tmp_dir, "key.txt", "//Alice")
    try:
        await content_server.start()
        await ledger_server.start()
        await asyncio.sleep(0.1)

        result = await _submit(settings, key, pgn_factory({"White": "Ann", "Black": "Ben", "Result": "1-0"}, plies=35))
    finally:
        await ledger_server.stop()
        await content_server.stop()

    assert result.ok
    out = capsys.readouterr().out
    assert "Saving to ledger..." in out
    assert "Recent verifications:" in out
    assert "#0 [Human Verified] Ann vs Ben (1-0)" in out
    assert out.index("Saving to ledger...") < out.index("Recent verifications:")
