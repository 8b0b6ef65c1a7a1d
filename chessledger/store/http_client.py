"""HTTP-based ContentStore client.

Talks to a content-addressed store exposing:
  POST /content        raw bytes in, {"cid": ...} out
  GET  /content/{cid}  raw bytes, or 404

No retries: every failure propagates to the caller.
"""

from __future__ import annotations

import bittensor as bt
import httpx

from chessledger.determinism import is_cid
from chessledger.errors import NotFound, StoreRejected, StoreUnavailable
from chessledger.models import RecordPayload


def _error_detail(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    if isinstance(body, dict) and "error" in body:
        return str(body["error"])
    return resp.text[:200]


class HTTPContentStore:
    """Client for a remote content store (pinning service or local node)."""

    def __init__(
        self,
        base_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._api_token = api_token
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HTTPContentStore:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    def _write_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/octet-stream"}
        if self._api_token:
            headers["Authorization"] = f"Bearer {self._api_token}"
        return headers

    # -- ContentStore interface --

    async def put(self, payload: RecordPayload) -> str:
        content = payload.to_bytes()
        try:
            resp = await self._client.post(
                f"{self.base_url}/content",
                content=content,
                headers=self._write_headers(),
            )
        except httpx.TransportError as e:
            bt.logging.warning({"content_store": {"op": "put", "error": str(e)}})
            raise StoreUnavailable(f"put failed: {e}") from e

        if not resp.is_success:
            detail = _error_detail(resp)
            bt.logging.warning({"content_store": {"op": "put", "status": resp.status_code, "error": detail}})
            raise StoreRejected(f"put rejected ({resp.status_code}): {detail}", status=resp.status_code)

        try:
            cid = resp.json()["cid"]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreRejected("put response carries no cid", status=resp.status_code) from e
        if not isinstance(cid, str) or not cid:
            raise StoreRejected("put response carries an empty cid", status=resp.status_code)

        bt.logging.debug({"content_store": {"op": "put", "cid": cid, "bytes": len(content)}})
        return cid

    async def get(self, cid: str) -> RecordPayload:
        # Ledger entries carry arbitrary strings; only well-formed CIDs go on the wire
        if not is_cid(cid):
            raise NotFound(f"not a content identifier: {cid!r}")
        try:
            resp = await self._client.get(f"{self.base_url}/content/{cid}")
        except httpx.TransportError as e:
            raise StoreUnavailable(f"get failed: {e}") from e

        if resp.status_code == 404:
            raise NotFound(f"no content for {cid}")
        if not resp.is_success:
            raise StoreUnavailable(f"get failed ({resp.status_code}): {_error_detail(resp)}")

        return RecordPayload.from_bytes(resp.content)


__all__ = ["HTTPContentStore"]
