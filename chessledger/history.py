"""History reconstruction: join recent ledger entries with their content.

The ledger is authoritative and must be readable; without a count there is
no window to read, so ledger failures abort the whole reconstruction. The
content store is best-effort per entry: a failed fetch degrades that one
item to sentinel values and the walk continues.
"""

from __future__ import annotations

import bittensor as bt

from chessledger.errors import ContentStoreError, LedgerError, LedgerUnavailable
from chessledger.ledger.interface import Ledger
from chessledger.models import HistoryItem, LedgerEntry
from chessledger.store.interface import ContentStore

DEFAULT_WINDOW = 5


class HistoryReconciler:
    """Read path. Every call re-fetches; nothing is cached."""

    def __init__(
        self,
        ledger: Ledger,
        store: ContentStore,
        max_items: int = DEFAULT_WINDOW,
        gateway_url: str | None = None,
    ):
        if max_items < 0:
            raise ValueError("max_items must be >= 0")
        self.ledger = ledger
        self.store = store
        self.max_items = max_items
        self.gateway_url = gateway_url.rstrip("/") if gateway_url else None

    def content_url(self, cid: str) -> str | None:
        if not self.gateway_url:
            return None
        return f"{self.gateway_url}/{cid}"

    async def reconstruct(self, max_items: int | None = None) -> list[HistoryItem]:
        """Most-recent-first joined history of at most ``max_items`` entries."""
        limit = self.max_items if max_items is None else max_items
        if limit < 0:
            raise ValueError("max_items must be >= 0")

        try:
            n = await self.ledger.count()
        except LedgerUnavailable:
            raise
        except LedgerError as e:
            raise LedgerUnavailable(f"ledger count failed: {e.describe()}") from e

        window = min(n, limit)
        items: list[HistoryItem] = []
        for index in range(n - 1, n - window - 1, -1):
            entry = await self._read_entry(index)
            items.append(await self._join(entry))

        degraded = sum(1 for item in items if not item.content_available)
        bt.logging.info({"history": {"count": n, "window": window, "degraded": degraded}})
        return items

    async def _read_entry(self, index: int) -> LedgerEntry:
        # The window lies inside a count snapshot of an append-only log,
        # so any failure here means the ledger itself is unreadable.
        try:
            return await self.ledger.read_at(index)
        except LedgerUnavailable:
            raise
        except LedgerError as e:
            raise LedgerUnavailable(f"ledger read of entry {index} failed: {e.describe()}") from e

    async def _join(self, entry: LedgerEntry) -> HistoryItem:
        url = self.content_url(entry.cid)
        try:
            payload = await self.store.get(entry.cid)
        except ContentStoreError as e:
            bt.logging.warning({"history": {"index": entry.index, "cid": entry.cid, "content_error": e.describe()}})
            return HistoryItem.join(entry, None, content_error=e.describe(), gateway_url=url)
        return HistoryItem.join(entry, payload, gateway_url=url)


__all__ = ["DEFAULT_WINDOW", "HistoryReconciler"]
