"""
Wallet plugins - signing capabilities handed to a Session.

A wallet plugin only signs digests. It knows nothing about transactions,
actors or networks beyond what the session passes in.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from ..chain.chains import ChainDefinition
from .keys import PrivateKey, PublicKey, Signature

logger = logging.getLogger(__name__)


class WalletPlugin(ABC):
    @property
    @abstractmethod
    def public_key(self) -> PublicKey:
        pass

    @abstractmethod
    def sign(self, chain: ChainDefinition, digest: bytes) -> Signature:
        pass


class WalletPluginPrivateKey(WalletPlugin):
    """
    Sign with a private key held in memory.

    Args:
        private_key: ``PVT_K1_...`` or WIF private key string

    Raises:
        InvalidKeyError: If the key string is malformed
    """

    def __init__(self, private_key: str) -> None:
        self._private_key = PrivateKey.from_string(private_key)

    def __repr__(self) -> str:
        return f"WalletPluginPrivateKey(public_key={self.public_key.to_string()!r})"

    @property
    def public_key(self) -> PublicKey:
        return self._private_key.public_key

    def sign(self, chain: ChainDefinition, digest: bytes) -> Signature:
        logger.debug("Signing digest %s for chain %s", digest.hex(), chain.id)
        return self._private_key.sign(digest)
