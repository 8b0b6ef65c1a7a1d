"""Key import plus append signing and verification using bittensor keypairs.

The submitter signs each ledger append with its keypair. The ledger
verifies the signature against the submitter address before committing.
"""

from __future__ import annotations

import secrets
from typing import Any

import bittensor as bt

from chessledger.determinism import compute_hash
from chessledger.errors import InvalidKey
from chessledger.models import SignedAppend, Verdict

_MNEMONIC_WORD_COUNTS = (12, 15, 18, 21, 24)


class Signer:
    """Signing capability over a single sr25519 keypair."""

    def __init__(self, keypair: Any):
        self._keypair = keypair

    @classmethod
    def from_wallet(cls, wallet: Any) -> Signer:
        """Use the hotkey of a bittensor wallet."""
        return cls(wallet.hotkey)

    @property
    def address(self) -> str:
        return self._keypair.ss58_address

    def sign(self, payload: bytes) -> str:
        """Sign raw bytes. Returns a hex-encoded signature."""
        signature = self._keypair.sign(payload)
        return signature.hex() if isinstance(signature, bytes) else str(signature)

    def __repr__(self) -> str:
        return f"Signer({self.address})"


def load_signer(raw: bytes | str) -> Signer:
    """Import key material from user-supplied bytes.

    Accepts a secret URI (``//Alice``), a BIP39 mnemonic, or a hex-encoded
    32-byte seed with optional ``0x`` prefix.
    """
    try:
        text = raw.decode("utf-8") if isinstance(raw, bytes) else raw
    except UnicodeDecodeError as e:
        raise InvalidKey("key material is not text") from e
    text = text.strip()
    if not text:
        raise InvalidKey("key material is empty")

    try:
        if text.startswith("//"):
            keypair = bt.Keypair.create_from_uri(text)
        elif len(text.split()) in _MNEMONIC_WORD_COUNTS:
            keypair = bt.Keypair.create_from_mnemonic(text)
        else:
            seed = text[2:] if text.lower().startswith("0x") else text
            if len(seed) != 64:
                raise InvalidKey("seed must be 32 bytes of hex")
            bytes.fromhex(seed)
            keypair = bt.Keypair.create_from_seed(seed)
    except InvalidKey:
        raise
    except Exception as e:
        raise InvalidKey(f"could not decode key: {e}") from e

    return Signer(keypair)


# -- Append signing --


def _append_signing_payload(call: SignedAppend) -> str:
    """Canonical hash of the call, excluding the signature itself."""
    data = call.model_dump(mode="json")
    data.pop("signature", None)
    return compute_hash(data)


def sign_append(verdict: Verdict, cid: str, signer: Signer) -> SignedAppend:
    """Build and sign an append call for ``signer``."""
    call = SignedAppend(
        verdict=verdict,
        cid=cid,
        submitter=signer.address,
        nonce=secrets.token_hex(16),
    )
    call.signature = signer.sign(_append_signing_payload(call).encode())
    return call


def verify_append(call: SignedAppend) -> bool:
    """Verify an append call's signature against its submitter address."""
    if not call.signature:
        return False

    payload_hash = _append_signing_payload(call)
    try:
        sig_bytes = bytes.fromhex(call.signature)
    except ValueError:
        return False

    try:
        keypair = bt.Keypair(ss58_address=call.submitter)
        return keypair.verify(payload_hash.encode(), sig_bytes)
    except Exception:
        return False


__all__ = ["Signer", "load_signer", "sign_append", "verify_append"]
