"""Unit tests for K1 keys, signatures and the private key wallet plugin."""

from __future__ import annotations

import hashlib

import pytest

from dropskit.chain.chains import Chains
from dropskit.sigil.keys import (
    InvalidKeyError,
    InvalidSignatureError,
    PrivateKey,
    PublicKey,
    Signature,
    decode_check,
    encode_check,
    is_canonical,
)
from dropskit.sigil.wallet import WalletPluginPrivateKey

from conftest import DEV_PRIVATE_KEY, DEV_PUBLIC_KEY


@pytest.fixture()
def dev_key() -> PrivateKey:
    return PrivateKey.from_string(DEV_PRIVATE_KEY)


class TestPrivateKey:
    def test_wif_derives_known_public_key(self, dev_key: PrivateKey) -> None:
        assert dev_key.public_key.to_legacy_string() == DEV_PUBLIC_KEY

    def test_wif_round_trip(self, dev_key: PrivateKey) -> None:
        assert dev_key.to_wif() == DEV_PRIVATE_KEY

    def test_pvt_k1_format_matches_wif(self, dev_key: PrivateKey) -> None:
        pvt = dev_key.to_string()
        assert pvt.startswith("PVT_K1_")

        parsed = PrivateKey.from_string(pvt)
        assert parsed.public_key == dev_key.public_key

    def test_surrounding_whitespace_ignored(self) -> None:
        key = PrivateKey.from_string(f"  {DEV_PRIVATE_KEY}\n")
        assert key.public_key.to_legacy_string() == DEV_PUBLIC_KEY

    def test_bad_wif_checksum(self) -> None:
        broken = DEV_PRIVATE_KEY[:-1] + ("4" if DEV_PRIVATE_KEY[-1] != "4" else "5")
        with pytest.raises(InvalidKeyError):
            PrivateKey.from_string(broken)

    def test_bad_pvt_k1_checksum(self, dev_key: PrivateKey) -> None:
        pvt = dev_key.to_string()
        broken = pvt[:-1] + ("A" if pvt[-1] != "A" else "B")
        with pytest.raises(InvalidKeyError):
            PrivateKey.from_string(broken)

    def test_unsupported_key_type(self) -> None:
        with pytest.raises(InvalidKeyError, match="K1"):
            PrivateKey.from_string("PVT_R1_2sXhBwN8hCZ4xxxxxxxxxxxx")

    @pytest.mark.parametrize("value", ["", "not-a-key", "0OIl"])
    def test_garbage(self, value: str) -> None:
        with pytest.raises(InvalidKeyError):
            PrivateKey.from_string(value)

    def test_repr_hides_secret(self, dev_key: PrivateKey) -> None:
        assert DEV_PRIVATE_KEY not in repr(dev_key)

    def test_generate(self) -> None:
        key = PrivateKey.generate()
        assert PrivateKey.from_string(key.to_string()).public_key == key.public_key


class TestPublicKey:
    def test_legacy_and_k1_formats(self) -> None:
        legacy = PublicKey.from_string(DEV_PUBLIC_KEY)
        k1 = PublicKey.from_string(legacy.to_string())

        assert legacy.to_string().startswith("PUB_K1_")
        assert k1 == legacy
        assert k1.to_legacy_string() == DEV_PUBLIC_KEY

    def test_unknown_prefix(self) -> None:
        with pytest.raises(InvalidKeyError):
            PublicKey.from_string("XYZ6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV")

    def test_k1_checksum_includes_key_type(self) -> None:
        payload = b"\x02" + b"\x11" * 32
        encoded = encode_check(payload, "K1")

        assert decode_check(encoded, "K1") == payload
        with pytest.raises(ValueError):
            decode_check(encoded, None)


class TestSignature:
    def test_sign_is_canonical_and_recoverable(self, dev_key: PrivateKey) -> None:
        digest = hashlib.sha256(b"drops").digest()
        signature = dev_key.sign(digest)

        assert signature.is_canonical()
        assert signature.recover(digest) == dev_key.public_key
        assert dev_key.public_key.verify(digest, signature)

    def test_string_round_trip(self, dev_key: PrivateKey) -> None:
        digest = hashlib.sha256(b"epoch").digest()
        signature = dev_key.sign(digest)
        text = signature.to_string()

        assert text.startswith("SIG_K1_")
        assert Signature.from_string(text) == signature

    def test_verify_rejects_other_digest(self, dev_key: PrivateKey) -> None:
        signature = dev_key.sign(hashlib.sha256(b"a").digest())
        assert not dev_key.public_key.verify(hashlib.sha256(b"b").digest(), signature)

    def test_digest_length(self, dev_key: PrivateKey) -> None:
        with pytest.raises(ValueError):
            dev_key.sign(b"short")

    def test_bad_signature_string(self) -> None:
        with pytest.raises(InvalidSignatureError):
            Signature.from_string("SIG_R1_abc")
        with pytest.raises(InvalidSignatureError):
            Signature.from_string("SIG_K1_111111111")

    def test_canonical_rules(self) -> None:
        assert is_canonical(0x7F << 248, 0x7F << 248)
        assert not is_canonical(0x80 << 248, 1 << 248)
        assert not is_canonical(0x7F << 248, 0x01)


class TestWalletPluginPrivateKey:
    def test_signs_with_configured_key(self) -> None:
        plugin = WalletPluginPrivateKey(DEV_PRIVATE_KEY)
        digest = hashlib.sha256(b"session").digest()

        signature = plugin.sign(Chains.Jungle4, digest)

        assert plugin.public_key.to_legacy_string() == DEV_PUBLIC_KEY
        assert signature.recover(digest) == plugin.public_key

    def test_invalid_key(self) -> None:
        with pytest.raises(InvalidKeyError):
            WalletPluginPrivateKey("PVT_K1_invalid")

    def test_repr_hides_secret(self) -> None:
        assert DEV_PRIVATE_KEY not in repr(WalletPluginPrivateKey(DEV_PRIVATE_KEY))
