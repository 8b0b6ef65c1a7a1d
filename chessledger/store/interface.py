"""ContentStore protocol - pluggable content-addressed storage.

Implementations: FilesystemContentStore (local), HTTPContentStore (remote).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chessledger.models import RecordPayload


@runtime_checkable
class ContentStore(Protocol):
    """Abstract interface for writing/reading record payloads by CID."""

    async def put(self, payload: RecordPayload) -> str:
        """Write a payload. Returns its CID."""
        ...

    async def get(self, cid: str) -> RecordPayload:
        """Fetch the payload stored under ``cid``."""
        ...


__all__ = ["ContentStore"]
