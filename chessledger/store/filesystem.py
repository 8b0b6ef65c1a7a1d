"""Filesystem-based ContentStore implementation.

Stores each blob once, named by its CID:
  {data_dir}/content/{cid}

Blobs are never modified or deleted. Writing bytes that are already
present is a no-op returning the same CID.
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

from chessledger.determinism import compute_cid, is_cid
from chessledger.errors import NotFound, StoreUnavailable
from chessledger.models import RecordPayload


class FilesystemContentStore:
    """Local content-addressed blob store."""

    def __init__(self, data_dir: str):
        self.content_dir = Path(data_dir) / "content"
        self.content_dir.mkdir(parents=True, exist_ok=True)

    def _path(self, cid: str) -> Path:
        return self.content_dir / cid

    # -- Raw bytes (used by the HTTP server) --

    def put_bytes(self, content: bytes) -> str:
        cid = compute_cid(content)
        path = self._path(cid)
        if path.exists():
            return cid

        tmp_fd, tmp_path = tempfile.mkstemp(dir=str(self.content_dir), suffix=".tmp")
        try:
            with os.fdopen(tmp_fd, "wb") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, str(path))
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StoreUnavailable(f"write failed: {e}") from e
        return cid

    def get_bytes(self, cid: str) -> bytes:
        if not is_cid(cid):
            raise NotFound(f"not a content identifier: {cid!r}")
        path = self._path(cid)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFound(f"no content for {cid}") from e
        except OSError as e:
            raise StoreUnavailable(f"read failed: {e}") from e

    def has(self, cid: str) -> bool:
        return is_cid(cid) and self._path(cid).exists()

    # -- ContentStore interface --

    async def put(self, payload: RecordPayload) -> str:
        return self.put_bytes(payload.to_bytes())

    async def get(self, cid: str) -> RecordPayload:
        return RecordPayload.from_bytes(self.get_bytes(cid))


__all__ = ["FilesystemContentStore"]
