"""
K1 (secp256k1) Key Management for Antelope chains.

This module handles the key and signature formats used on Antelope networks:

- Private keys: legacy WIF (``5...``) and ``PVT_K1_...``
- Public keys:  legacy ``EOS...`` and ``PUB_K1_...``
- Signatures:   ``SIG_K1_...`` (compact, recoverable, canonical)

Checksums are RIPEMD-160 based (``PVT_K1_``/``PUB_K1_``/``SIG_K1_`` append
the key type ``K1`` before hashing) except for WIF, which uses double SHA-256.

Dependencies: cryptography (ECDSA signing), eth-keys (public key recovery),
pycryptodome (RIPEMD-160), base58.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass

import base58
from Crypto.Hash import RIPEMD160
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    Prehashed,
    decode_dss_signature,
    encode_dss_signature,
)
from eth_keys import keys as eth_keys
from eth_keys.exceptions import BadSignature, ValidationError

# secp256k1 group order
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141

WIF_VERSION = 0x80
LEGACY_PUBLIC_PREFIX = "EOS"
KEY_TYPE = "K1"

# Random nonces give a canonical signature roughly every other try.
MAX_SIGN_ATTEMPTS = 64


class InvalidKeyError(ValueError):
    """Key string or key material is malformed."""


class InvalidSignatureError(ValueError):
    """Signature string is malformed or cannot be recovered."""


class SigningError(RuntimeError):
    """No canonical signature could be produced."""


# ============ Encoding helpers ============


def _ripemd160(data: bytes) -> bytes:
    h = RIPEMD160.new()
    h.update(data)
    return h.digest()


def _double_sha256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def _checksum(payload: bytes, key_type: str | None) -> bytes:
    suffix = key_type.encode("ascii") if key_type else b""
    return _ripemd160(payload + suffix)[:4]


def encode_check(payload: bytes, key_type: str | None = KEY_TYPE) -> str:
    return base58.b58encode(payload + _checksum(payload, key_type)).decode("ascii")


def decode_check(encoded: str, key_type: str | None = KEY_TYPE) -> bytes:
    """
    Decode a base58 string and verify its RIPEMD-160 checksum.

    Raises:
        ValueError: If the string is not base58 or the checksum mismatches
    """
    raw = base58.b58decode(encoded)
    payload, checksum = raw[:-4], raw[-4:]
    if len(payload) == 0 or checksum != _checksum(payload, key_type):
        raise ValueError("checksum mismatch")
    return payload


def is_canonical(r: int, s: int) -> bool:
    """Antelope only accepts signatures whose r and s are "canonical".

    Neither value may have its high bit set, nor a zero leading byte followed
    by a byte without the high bit.
    """
    for value in (r, s):
        raw = value.to_bytes(32, "big")
        if raw[0] & 0x80:
            return False
        if raw[0] == 0 and not raw[1] & 0x80:
            return False
    return True


# ============ Public key ============


@dataclass(frozen=True)
class PublicKey:
    """Compressed (33 byte) secp256k1 public key."""

    data: bytes

    @classmethod
    def from_string(cls, value: str) -> "PublicKey":
        """
        Parse a ``PUB_K1_...`` or legacy ``EOS...`` public key.

        Raises:
            InvalidKeyError: If the string is malformed
        """
        try:
            if value.startswith("PUB_K1_"):
                data = decode_check(value[len("PUB_K1_"):], KEY_TYPE)
            elif value.startswith(LEGACY_PUBLIC_PREFIX):
                data = decode_check(value[len(LEGACY_PUBLIC_PREFIX):], None)
            else:
                raise ValueError("unknown public key format")
        except ValueError as exc:
            raise InvalidKeyError(f"Invalid public key {value!r}: {exc}") from exc

        if len(data) != 33:
            raise InvalidKeyError(f"Invalid public key {value!r}: expected 33 bytes")
        return cls(data)

    @classmethod
    def from_uncompressed(cls, raw: bytes) -> "PublicKey":
        """Build from 64 bytes of x || y (as returned by eth-keys)."""
        x, y = raw[:32], raw[32:]
        prefix = b"\x03" if y[-1] & 1 else b"\x02"
        return cls(prefix + x)

    def to_string(self) -> str:
        return "PUB_K1_" + encode_check(self.data, KEY_TYPE)

    def to_legacy_string(self, prefix: str = LEGACY_PUBLIC_PREFIX) -> str:
        return prefix + encode_check(self.data, None)

    def __str__(self) -> str:
        return self.to_string()

    def to_crypto_key(self) -> ec.EllipticCurvePublicKey:
        return ec.EllipticCurvePublicKey.from_encoded_point(ec.SECP256K1(), self.data)

    def verify(self, digest: bytes, signature: "Signature") -> bool:
        der = encode_dss_signature(signature.r, signature.s)
        try:
            self.to_crypto_key().verify(der, digest, ec.ECDSA(Prehashed(hashes.SHA256())))
        except InvalidSignature:
            return False
        return True


# ============ Signature ============


@dataclass(frozen=True)
class Signature:
    """Compact recoverable signature (recovery id, r, s)."""

    recid: int
    r: int
    s: int

    @classmethod
    def from_string(cls, value: str) -> "Signature":
        if not value.startswith("SIG_K1_"):
            raise InvalidSignatureError(f"Unsupported signature format: {value!r}")
        try:
            data = decode_check(value[len("SIG_K1_"):], KEY_TYPE)
        except ValueError as exc:
            raise InvalidSignatureError(f"Invalid signature {value!r}: {exc}") from exc
        if len(data) != 65:
            raise InvalidSignatureError(f"Invalid signature {value!r}: expected 65 bytes")
        return cls(
            recid=(data[0] - 27) & 3,
            r=int.from_bytes(data[1:33], "big"),
            s=int.from_bytes(data[33:], "big"),
        )

    def to_bytes(self) -> bytes:
        # 27 + 4 marks a signature over a compressed public key.
        header = self.recid + 27 + 4
        return bytes([header]) + self.r.to_bytes(32, "big") + self.s.to_bytes(32, "big")

    def to_string(self) -> str:
        return "SIG_K1_" + encode_check(self.to_bytes(), KEY_TYPE)

    def __str__(self) -> str:
        return self.to_string()

    def is_canonical(self) -> bool:
        return is_canonical(self.r, self.s)

    def recover(self, digest: bytes) -> PublicKey:
        """
        Recover the public key that produced this signature.

        Args:
            digest: 32 byte message digest that was signed

        Returns:
            Recovered public key

        Raises:
            InvalidSignatureError: If no key can be recovered
        """
        if self.recid not in (0, 1):
            raise InvalidSignatureError(f"Unsupported recovery id: {self.recid}")
        try:
            signature = eth_keys.Signature(vrs=(self.recid, self.r, self.s))
            recovered = signature.recover_public_key_from_msg_hash(digest)
        except (BadSignature, ValidationError) as exc:
            raise InvalidSignatureError(f"Cannot recover public key: {exc}") from exc
        return PublicKey.from_uncompressed(recovered.to_bytes())


# ============ Private key ============


class PrivateKey:
    """secp256k1 private key used to sign transaction digests."""

    def __init__(self, secret: bytes) -> None:
        if len(secret) != 32:
            raise InvalidKeyError(f"Private key must be 32 bytes, got {len(secret)}")
        exponent = int.from_bytes(secret, "big")
        if not 0 < exponent < CURVE_ORDER:
            raise InvalidKeyError("Private key is out of range for secp256k1")
        self._secret = secret
        self._key = ec.derive_private_key(exponent, ec.SECP256K1())
        self._public_key: PublicKey | None = None

    def __repr__(self) -> str:
        return f"PrivateKey(public_key={self.public_key.to_string()!r})"

    @classmethod
    def generate(cls) -> "PrivateKey":
        while True:
            secret = secrets.token_bytes(32)
            if 0 < int.from_bytes(secret, "big") < CURVE_ORDER:
                return cls(secret)

    @classmethod
    def from_string(cls, value: str) -> "PrivateKey":
        """
        Parse a private key string.

        Args:
            value: ``PVT_K1_...`` or legacy WIF (``5...``)

        Returns:
            PrivateKey instance

        Raises:
            InvalidKeyError: If the key is malformed or of an unsupported type
        """
        value = value.strip()
        if value.startswith("PVT_K1_"):
            try:
                return cls(decode_check(value[len("PVT_K1_"):], KEY_TYPE))
            except ValueError as exc:
                raise InvalidKeyError(f"Invalid PVT_K1 private key: {exc}") from exc
        if value.startswith("PVT_"):
            raise InvalidKeyError("Only K1 private keys are supported")
        return cls(_decode_wif(value))

    @property
    def public_key(self) -> PublicKey:
        if self._public_key is None:
            data = self._key.public_key().public_bytes(
                serialization.Encoding.X962,
                serialization.PublicFormat.CompressedPoint,
            )
            self._public_key = PublicKey(data)
        return self._public_key

    def to_wif(self) -> str:
        payload = bytes([WIF_VERSION]) + self._secret
        return base58.b58encode(payload + _double_sha256(payload)[:4]).decode("ascii")

    def to_string(self) -> str:
        return "PVT_K1_" + encode_check(self._secret, KEY_TYPE)

    def sign(self, digest: bytes) -> Signature:
        """
        Sign a 32 byte digest.

        The ECDSA nonce is random, so signing is repeated until the
        signature is canonical. ``s`` is normalized to the lower half of
        the curve order before the canonical check.

        Raises:
            ValueError: If digest is not 32 bytes
            SigningError: If no canonical signature was found
        """
        if len(digest) != 32:
            raise ValueError(f"Digest must be 32 bytes, got {len(digest)}")

        public_key = self.public_key
        for _ in range(MAX_SIGN_ATTEMPTS):
            der = self._key.sign(digest, ec.ECDSA(Prehashed(hashes.SHA256())))
            r, s = decode_dss_signature(der)
            if s > CURVE_ORDER // 2:
                s = CURVE_ORDER - s
            if not is_canonical(r, s):
                continue
            for recid in (0, 1):
                candidate = Signature(recid, r, s)
                try:
                    if candidate.recover(digest) == public_key:
                        return candidate
                except InvalidSignatureError:
                    continue
        raise SigningError(f"No canonical signature after {MAX_SIGN_ATTEMPTS} attempts")


def _decode_wif(value: str) -> bytes:
    try:
        raw = base58.b58decode(value)
    except ValueError as exc:
        raise InvalidKeyError(f"Invalid WIF private key: {exc}") from exc
    payload, checksum = raw[:-4], raw[-4:]
    if len(payload) != 33 or payload[0] != WIF_VERSION:
        raise InvalidKeyError("Invalid WIF private key: unexpected length or version")
    if _double_sha256(payload)[:4] != checksum:
        raise InvalidKeyError("Invalid WIF private key: checksum mismatch")
    return payload[1:]
