"""HTTP endpoint serving a FilesystemContentStore.

Routes:
  POST /content        - store raw bytes, returns {"cid": ...}
  GET  /content/{cid}  - fetch raw bytes

Writes require a bearer token when one is configured; reads are public,
like a gateway.
"""

from __future__ import annotations

import hmac

import bittensor as bt
from aiohttp import web

from chessledger.errors import NotFound, StoreUnavailable
from chessledger.store.filesystem import FilesystemContentStore

MAX_CONTENT_BYTES = 4 * 1024 * 1024


class ContentStoreHTTPServer:
    """Lightweight async HTTP server for content-addressed blobs."""

    def __init__(
        self,
        store: FilesystemContentStore,
        api_token: str | None = None,
        host: str = "127.0.0.1",
        port: int = 8300,
    ):
        self.store = store
        self.api_token = api_token
        self.host = host
        self.port = port
        self._runner: web.AppRunner | None = None

    def _build_app(self) -> web.Application:
        app = web.Application(client_max_size=MAX_CONTENT_BYTES)
        app.router.add_post("/content", self._handle_put)
        app.router.add_get("/content/{cid}", self._handle_get)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._runner = web.AppRunner(self._build_app())
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"content_http": {"status": "started", "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            bt.logging.info({"content_http": "stopped"})

    def _authorized(self, request: web.Request) -> bool:
        if not self.api_token:
            return True
        auth = request.headers.get("Authorization", "")
        if not auth.startswith("Bearer "):
            return False
        return hmac.compare_digest(auth[7:], self.api_token)

    async def _handle_put(self, request: web.Request) -> web.Response:
        if not self._authorized(request):
            bt.logging.warning({"content_request": {"endpoint": "put", "status": 401}})
            return web.json_response({"error": "unauthorized"}, status=401)

        content = await request.read()
        if not content:
            return web.json_response({"error": "empty_content"}, status=400)

        try:
            cid = self.store.put_bytes(content)
        except StoreUnavailable as e:
            bt.logging.error({"content_request": {"endpoint": "put", "status": 500, "error": str(e)}})
            return web.json_response({"error": "write_failed"}, status=500)

        bt.logging.info({"content_request": {"endpoint": "put", "status": 200, "cid": cid, "bytes": len(content)}})
        return web.json_response({"cid": cid})

    async def _handle_get(self, request: web.Request) -> web.Response:
        cid = request.match_info["cid"]
        try:
            content = self.store.get_bytes(cid)
        except NotFound:
            bt.logging.debug({"content_request": {"endpoint": "get", "status": 404, "cid": cid}})
            return web.json_response({"error": "not_found"}, status=404)
        except StoreUnavailable as e:
            bt.logging.error({"content_request": {"endpoint": "get", "status": 500, "error": str(e)}})
            return web.json_response({"error": "read_failed"}, status=500)

        return web.Response(body=content, content_type="application/octet-stream")


__all__ = ["ContentStoreHTTPServer"]
