"""Tests for key import and append signing/verification."""

import pytest

from chessledger.errors import InvalidKey
from chessledger.models import Verdict
from chessledger.signer import Signer, load_signer, sign_append, verify_append

CID = "bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku"


class TestLoadSigner:

    def test_secret_uri(self):
        import bittensor as bt
        signer = load_signer(b"//Alice\n")
        assert signer.address == bt.Keypair.create_from_uri("//Alice").ss58_address

    def test_mnemonic(self):
        import bittensor as bt
        mnemonic = bt.Keypair.generate_mnemonic()
        signer = load_signer(mnemonic.encode())
        assert signer.address == bt.Keypair.create_from_mnemonic(mnemonic).ss58_address

    def test_hex_seed_with_and_without_prefix(self):
        seed = "11" * 32
        assert load_signer(seed).address == load_signer(f"0x{seed}\n").address

    def test_same_key_same_address(self):
        assert load_signer(b"//Bob").address == load_signer(b"//Bob").address

    @pytest.mark.parametrize("raw", [
        b"",
        b"   \n",
        b"\xff\xfe\x00",
        b"not-a-key",
        b"0x1234",
        ("zz" * 32).encode(),
    ])
    def test_invalid_key_material(self, raw):
        with pytest.raises(InvalidKey):
            load_signer(raw)

    def test_from_wallet_uses_hotkey(self):
        import bittensor as bt

        class _Wallet:
            hotkey = bt.Keypair.create_from_uri("//Charlie")

        assert Signer.from_wallet(_Wallet()).address == _Wallet.hotkey.ss58_address


class TestAppendSigning:

    def test_sign_verify_roundtrip(self, signer):
        call = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        assert call.submitter == signer.address
        assert verify_append(call)

    def test_signature_is_hex(self, signer):
        call = sign_append(Verdict.AI_SUSPECTED, CID, signer)
        assert len(bytes.fromhex(call.signature)) == 64

    def test_tampered_verdict_rejected(self, signer):
        call = sign_append(Verdict.AI_SUSPECTED, CID, signer)
        call.verdict = Verdict.HUMAN_VERIFIED
        assert not verify_append(call)

    def test_tampered_cid_rejected(self, signer):
        call = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        call.cid = CID[:-1] + "a"
        assert not verify_append(call)

    def test_wrong_submitter_rejected(self, signer, other_signer):
        call = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        call.submitter = other_signer.address
        assert not verify_append(call)

    def test_missing_or_garbage_signature(self, signer):
        call = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        call.signature = ""
        assert not verify_append(call)
        call.signature = "not-hex"
        assert not verify_append(call)

    def test_nonces_are_unique(self, signer):
        a = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        b = sign_append(Verdict.HUMAN_VERIFIED, CID, signer)
        assert a.nonce != b.nonce
        assert a.signature != b.signature
