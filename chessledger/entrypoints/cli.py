"""Command line glue around the recording pipeline and history reconciler.

Usage:
    python -m chessledger.entrypoints.cli classify game.pgn
    python -m chessledger.entrypoints.cli submit --key-file key.txt game.pgn
    python -m chessledger.entrypoints.cli history --limit 10
    python -m chessledger.entrypoints.cli serve

Endpoints and defaults come from CHESSLEDGER_* environment variables
(see chessledger.config).
"""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from pathlib import Path

import bittensor as bt

from chessledger.classifier import classify_transcript
from chessledger.config import Settings, load_settings
from chessledger.errors import ChessLedgerError
from chessledger.history import HistoryReconciler
from chessledger.ledger.filesystem import FilesystemLedger
from chessledger.ledger.rpc_client import HTTPLedgerClient
from chessledger.ledger.rpc_server import LedgerRPCServer
from chessledger.models import HistoryItem
from chessledger.pipeline import PipelineState, RecordingPipeline, SubmissionResult
from chessledger.signer import load_signer
from chessledger.store.filesystem import FilesystemContentStore
from chessledger.store.http_client import HTTPContentStore
from chessledger.store.http_server import ContentStoreHTTPServer
from chessledger.transcript import parse_pgn


def _format_item(item: HistoryItem) -> str:
    line = f"#{item.index} [{item.verdict.label}] {item.white} vs {item.black} ({item.result})"
    line += f"\n    CID: {item.cid}"
    if item.gateway_url:
        line += f"\n    {item.gateway_url}"
    if not item.content_available:
        line += f"\n    content unavailable: {item.content_error}"
    return line


def _show_items(items: list[HistoryItem]) -> None:
    if not items:
        print("No verifications recorded yet.")
    for item in items:
        print(_format_item(item))


def _reconciler(settings: Settings, ledger, store) -> HistoryReconciler:
    return HistoryReconciler(
        ledger, store,
        max_items=settings.history.window,
        gateway_url=settings.store.gateway_url,
    )


async def _print_history(settings: Settings, limit: int | None) -> None:
    async with HTTPLedgerClient(settings.ledger.url, timeout=settings.ledger.timeout) as ledger, \
            HTTPContentStore(settings.store.url, timeout=settings.store.timeout) as store:
        items = await _reconciler(settings, ledger, store).reconstruct(limit)
    _show_items(items)


_PROGRESS = {
    PipelineState.ANALYZING: "Analyzing PGN...",
    PipelineState.UPLOADING: "Uploading to content store...",
    PipelineState.COMMITTING: "Saving to ledger...",
}


def _report_progress(state: PipelineState, _result: SubmissionResult) -> None:
    if state in _PROGRESS:
        print(_PROGRESS[state])


async def _submit(settings: Settings, key_file: str, pgn_text: str) -> SubmissionResult:
    signer = load_signer(Path(key_file).read_bytes())
    print(f"Wallet loaded: {signer.address}")

    async with HTTPContentStore(
        settings.store.url, api_token=settings.store.api_token, timeout=settings.store.timeout,
    ) as store, HTTPLedgerClient(settings.ledger.url, timeout=settings.ledger.timeout) as ledger:
        reconciler = _reconciler(settings, ledger, store)

        async def refresh_history(state: PipelineState, _result: SubmissionResult) -> None:
            if state is PipelineState.DONE:
                print("Recent verifications:")
                _show_items(await reconciler.reconstruct())

        pipeline = RecordingPipeline(store, ledger, signer)
        pipeline.add_listener(_report_progress)
        pipeline.add_listener(refresh_history)
        return await pipeline.submit(pgn_text)


async def _serve(settings: Settings) -> None:
    node = settings.node
    content_server = ContentStoreHTTPServer(
        FilesystemContentStore(node.data_dir),
        api_token=settings.store.api_token,
        host=node.host,
        port=node.store_port,
    )
    ledger_server = LedgerRPCServer(
        FilesystemLedger(node.data_dir), host=node.host, port=node.ledger_port,
    )

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await content_server.start()
    await ledger_server.start()
    try:
        await stop.wait()
    finally:
        bt.logging.info({"node": "shutdown_signal_received"})
        await ledger_server.stop()
        await content_server.stop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Chess transcript verification ledger")
    sub = parser.add_subparsers(dest="command", required=True)

    p_classify = sub.add_parser("classify", help="Parse and classify a PGN file")
    p_classify.add_argument("pgn_file")

    p_submit = sub.add_parser("submit", help="Classify, upload and commit a PGN file")
    p_submit.add_argument("pgn_file")
    p_submit.add_argument("--key-file", default=None, help="File holding the signing key")

    p_history = sub.add_parser("history", help="Show recent verifications")
    p_history.add_argument("--limit", type=int, default=None)

    sub.add_parser("serve", help="Run local content store and ledger nodes")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    try:
        if args.command == "classify":
            transcript = parse_pgn(Path(args.pgn_file).read_text(encoding="utf-8"))
            verdict = classify_transcript(transcript)
            print(f"{verdict.value} ({verdict.label}), {transcript.ply_count} plies")
            return 0

        if args.command == "history":
            asyncio.run(_print_history(settings, args.limit))
            return 0

        if args.command == "serve":
            asyncio.run(_serve(settings))
            return 0

        key_file = args.key_file or settings.wallet.key_file
        if not key_file:
            print("A key file is required (--key-file or CHESSLEDGER_WALLET__KEY_FILE).", file=sys.stderr)
            return 2
        pgn_text = Path(args.pgn_file).read_text(encoding="utf-8")
        result = asyncio.run(_submit(settings, key_file, pgn_text))
    except ChessLedgerError as e:
        print(f"Error: {e.describe()}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not result.ok:
        print(f"Failed during {result.failed_stage.value.lower()}: {result.reason}", file=sys.stderr)
        if result.orphaned_cid:
            print(f"Content was stored but not committed. Orphaned CID: {result.orphaned_cid}", file=sys.stderr)
        return 1

    print(f"Verdict: {result.verdict.label}")
    print(f"CID: {result.cid}")
    print(f"Ledger index: {result.index}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
