"""HTTP RPC client for a remote ledger node.

Reads map transport failures to LedgerUnavailable. Appends distinguish
timeouts (WriteTimeout, outcome unknown) from other transport failures
(NetworkError) and signature refusals (SignatureRejected). Nothing is
retried here.
"""

from __future__ import annotations

import bittensor as bt
import httpx
from pydantic import ValidationError

from chessledger.errors import (
    IndexOutOfRange,
    LedgerUnavailable,
    NetworkError,
    SignatureRejected,
    WriteTimeout,
)
from chessledger.models import LedgerEntry, Verdict
from chessledger.signer import Signer, sign_append


class HTTPLedgerClient:
    """Client-side view of the append-only ledger."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HTTPLedgerClient:
        return self

    async def __aexit__(self, *exc) -> None:
        await self.close()

    async def _read(self, path: str) -> httpx.Response:
        try:
            return await self._client.get(f"{self.base_url}{path}")
        except httpx.TransportError as e:
            bt.logging.warning({"ledger_client": {"path": path, "error": str(e)}})
            raise LedgerUnavailable(f"ledger read failed: {e}") from e

    # -- Ledger interface --

    async def count(self) -> int:
        resp = await self._read("/ledger/count")
        if not resp.is_success:
            raise LedgerUnavailable(f"count failed: {resp.status_code}")
        try:
            count = int(resp.json()["count"])
        except (ValueError, KeyError, TypeError) as e:
            raise LedgerUnavailable("malformed count response") from e
        if count < 0:
            raise LedgerUnavailable(f"ledger reported negative count {count}")
        return count

    async def read_at(self, index: int) -> LedgerEntry:
        if index < 0:
            raise IndexOutOfRange(index)
        resp = await self._read(f"/ledger/entries/{index}")
        if resp.status_code == 404:
            raise IndexOutOfRange(index)
        if not resp.is_success:
            raise LedgerUnavailable(f"read of entry {index} failed: {resp.status_code}")
        try:
            return LedgerEntry.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise LedgerUnavailable(f"malformed entry {index}") from e

    async def append(self, verdict: Verdict, cid: str, signer: Signer) -> int:
        call = sign_append(verdict, cid, signer)
        try:
            resp = await self._client.post(
                f"{self.base_url}/ledger/entries",
                json=call.model_dump(mode="json"),
            )
        except httpx.TimeoutException as e:
            raise WriteTimeout(f"append not confirmed: {e}") from e
        except httpx.TransportError as e:
            raise NetworkError(f"append failed: {e}") from e

        if resp.status_code == 403:
            raise SignatureRejected(resp.text[:200])
        if not resp.is_success:
            raise NetworkError(f"append failed ({resp.status_code}): {resp.text[:200]}")

        try:
            index = int(resp.json()["index"])
        except (ValueError, KeyError, TypeError) as e:
            raise NetworkError("append response carries no index") from e

        bt.logging.debug({"ledger_client": {"op": "append", "index": index, "cid": cid}})
        return index


__all__ = ["HTTPLedgerClient"]
