"""HTTP RPC endpoint exposing a FilesystemLedger.

Routes:
  GET  /ledger/count            - {"count": N}
  GET  /ledger/entries/{index}  - entry JSON, 404 when out of range
  POST /ledger/entries          - signed append, {"index": N} once durable
"""

from __future__ import annotations

import bittensor as bt
from aiohttp import web
from pydantic import ValidationError

from chessledger.errors import IndexOutOfRange, LedgerUnavailable, SignatureRejected
from chessledger.ledger.filesystem import FilesystemLedger
from chessledger.models import SignedAppend


def _hk(address: str | None) -> str:
    """Truncate address for log readability."""
    if not address:
        return "none"
    return address[:16]


class LedgerRPCServer:
    """Lightweight async HTTP server for ledger reads and appends."""

    def __init__(
        self,
        ledger: FilesystemLedger,
        host: str = "127.0.0.1",
        port: int = 8400,
    ):
        self.ledger = ledger
        self.host = host
        self.port = port
        self._runner: web.AppRunner | None = None

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/ledger/count", self._handle_count)
        app.router.add_get("/ledger/entries/{index}", self._handle_entry)
        app.router.add_post("/ledger/entries", self._handle_append)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self._build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"ledger_http": {"status": "started", "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            bt.logging.info({"ledger_http": "stopped"})

    async def _handle_count(self, request: web.Request) -> web.Response:
        return web.json_response({"count": await self.ledger.count()})

    async def _handle_entry(self, request: web.Request) -> web.Response:
        try:
            index = int(request.match_info["index"])
        except ValueError:
            return web.json_response({"error": "invalid_index"}, status=400)

        try:
            entry = await self.ledger.read_at(index)
        except IndexOutOfRange:
            return web.json_response({"error": "out_of_range"}, status=404)

        return web.json_response(entry.model_dump(mode="json"))

    async def _handle_append(self, request: web.Request) -> web.Response:
        try:
            call = SignedAppend.model_validate(await request.json())
        except (ValueError, ValidationError):
            bt.logging.warning({"ledger_request": {"endpoint": "append", "status": 400, "error": "invalid_body"}})
            return web.json_response({"error": "invalid_body"}, status=400)

        try:
            index = await self.ledger.commit(call)
        except SignatureRejected as e:
            bt.logging.warning({"ledger_request": {"endpoint": "append", "submitter": _hk(call.submitter), "status": 403}})
            return web.json_response({"error": "signature_rejected", "reason": e.message}, status=403)
        except LedgerUnavailable as e:
            bt.logging.error({"ledger_request": {"endpoint": "append", "status": 503, "error": e.message}})
            return web.json_response({"error": "unavailable"}, status=503)

        bt.logging.info({"ledger_request": {"endpoint": "append", "submitter": _hk(call.submitter), "status": 200, "index": index}})
        return web.json_response({"index": index})


__all__ = ["LedgerRPCServer"]
