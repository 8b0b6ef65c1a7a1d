"""Canonical encoding and hashing.

Both storage tiers depend on byte-exact encodings: the content store
derives CIDs from payload bytes and the ledger verifies signatures over a
hash of the append call. Everything that gets hashed goes through here.
"""

from __future__ import annotations

import base64
import hashlib
import json
from typing import Any

# CIDv1 prefix: version 1, raw codec (0x55), sha2-256 multihash (0x12, 32 bytes)
_CID_PREFIX = bytes([0x01, 0x55, 0x12, 0x20])
_MULTIBASE_BASE32 = "b"


def canonical_json(data: Any) -> bytes:
    """Serialize to UTF-8 JSON with sorted keys and no insignificant whitespace."""
    return json.dumps(
        data, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str,
    ).encode("utf-8")


def compute_hash(data: Any) -> str:
    """SHA256 hex digest of the canonical JSON form of ``data``."""
    return hashlib.sha256(canonical_json(data)).hexdigest()


def compute_cid(content: bytes) -> str:
    """Content identifier for raw bytes (CIDv1, raw, sha2-256, base32)."""
    digest = hashlib.sha256(content).digest()
    encoded = base64.b32encode(_CID_PREFIX + digest).decode("ascii")
    return _MULTIBASE_BASE32 + encoded.lower().rstrip("=")


def is_cid(value: str) -> bool:
    """Cheap shape check for CIDs produced by compute_cid."""
    if not value or not value.startswith(_MULTIBASE_BASE32):
        return False
    body = value[1:].upper()
    padding = "=" * (-len(body) % 8)
    try:
        raw = base64.b32decode(body + padding)
    except (ValueError, TypeError):
        return False
    return raw.startswith(_CID_PREFIX) and len(raw) == len(_CID_PREFIX) + 32


__all__ = ["canonical_json", "compute_cid", "compute_hash", "is_cid"]
