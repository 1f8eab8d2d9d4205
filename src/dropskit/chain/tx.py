"""
Transaction Builder - Assemble and serialize Antelope transactions.

The packed transaction is the binary layout the chain signs and stores:

    expiration          time_point_sec (uint32)
    ref_block_num       uint16
    ref_block_prefix    uint32
    max_net_usage_words varuint32
    max_cpu_usage_ms    uint8
    delay_sec           varuint32
    context_free_actions  action[]
    actions               action[]
    transaction_extensions  (always empty here)

Packing is delegated to antelopy's transaction and action serializers once
names and header fields have been checked.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from antelopy.types.serializers import ActionSerializer, TransactionSerializer
from antelopy.types.transaction import Action as AntelopeAction
from antelopy.types.transaction import Authorization, PreSerializedTransaction

from .abi import SerializationError, serialize_name

# The signing digest is sha256(chain_id || packed_trx || cfd_digest); with no
# context free data the last part is 32 zero bytes.
EMPTY_CFD_DIGEST = bytes(32)


@dataclass(frozen=True)
class PermissionLevel:
    actor: str
    permission: str

    @classmethod
    def from_dict(cls, payload: dict[str, str]) -> "PermissionLevel":
        return cls(actor=payload["actor"], permission=payload["permission"])

    def to_dict(self) -> dict[str, str]:
        return {"actor": self.actor, "permission": self.permission}


@dataclass
class Action:
    """A contract action with already serialized ``data``."""

    account: str
    name: str
    data: bytes
    authorization: list[PermissionLevel] = field(default_factory=list)

    def pack(self) -> bytes:
        """
        Serialize the action as it appears inside a transaction.

        Raises:
            SerializationError: If the account, action or a permission level
                is not a valid name
        """
        for value in (self.account, self.name):
            serialize_name(value)
        for level in self.authorization:
            serialize_name(level.actor)
            serialize_name(level.permission)
        return ActionSerializer().serialize(
            AntelopeAction(
                account=self.account,
                name=self.name,
                authorization=[
                    Authorization(actor=level.actor, permission=level.permission)
                    for level in self.authorization
                ],
                data=bytes(self.data),
            )
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "account": self.account,
            "name": self.name,
            "authorization": [level.to_dict() for level in self.authorization],
            "data": self.data.hex(),
        }


@dataclass
class Transaction:
    expiration: int
    ref_block_num: int
    ref_block_prefix: int
    actions: list[Action] = field(default_factory=list)
    context_free_actions: list[Action] = field(default_factory=list)
    max_net_usage_words: int = 0
    max_cpu_usage_ms: int = 0
    delay_sec: int = 0

    @classmethod
    def from_chain_info(
        cls,
        info: dict[str, Any],
        actions: Optional[list[Action]] = None,
        expire_seconds: int = 120,
    ) -> "Transaction":
        """
        Build a transaction header referencing the last irreversible block.

        Args:
            info: Response of ``get_info``
            actions: Actions to include
            expire_seconds: Seconds after head block time until expiry

        Returns:
            Unsigned transaction
        """
        head_time = datetime.fromisoformat(info["head_block_time"].rstrip("Z"))
        head_time = head_time.replace(tzinfo=timezone.utc)
        expiration = int((head_time + timedelta(seconds=expire_seconds)).timestamp())

        block_id = bytes.fromhex(info["last_irreversible_block_id"])
        ref_block_num = info["last_irreversible_block_num"] & 0xFFFF
        ref_block_prefix = struct.unpack_from("<I", block_id, 8)[0]

        return cls(
            expiration=expiration,
            ref_block_num=ref_block_num,
            ref_block_prefix=ref_block_prefix,
            actions=list(actions or []),
        )

    @property
    def expiration_time(self) -> datetime:
        return datetime.fromtimestamp(self.expiration, tz=timezone.utc)

    def pack(self) -> bytes:
        limits = (
            ("expiration", self.expiration, 1 << 32),
            ("ref_block_num", self.ref_block_num, 1 << 16),
            ("ref_block_prefix", self.ref_block_prefix, 1 << 32),
            ("max_net_usage_words", self.max_net_usage_words, 1 << 32),
            ("max_cpu_usage_ms", self.max_cpu_usage_ms, 1 << 8),
            ("delay_sec", self.delay_sec, 1 << 32),
        )
        for name, value, bound in limits:
            if not 0 <= value < bound:
                raise SerializationError(f"Transaction {name} out of range: {value}")

        return TransactionSerializer().serialize(
            PreSerializedTransaction(
                expiration=self.expiration_time,
                ref_block_num=self.ref_block_num,
                ref_block_prefix=self.ref_block_prefix,
                max_net_usage_words=self.max_net_usage_words,
                max_cpu_usage_ms=self.max_cpu_usage_ms,
                delay_sec=self.delay_sec,
                context_free_actions=[action.pack() for action in self.context_free_actions],
                actions=[action.pack() for action in self.actions],
                transaction_extensions=[],
            )
        )

    def id(self) -> str:
        return hashlib.sha256(self.pack()).hexdigest()

    def signing_digest(self, chain_id: str) -> bytes:
        return hashlib.sha256(bytes.fromhex(chain_id) + self.pack() + EMPTY_CFD_DIGEST).digest()

    def to_dict(self) -> dict[str, Any]:
        return {
            "expiration": self.expiration_time.strftime("%Y-%m-%dT%H:%M:%S"),
            "ref_block_num": self.ref_block_num,
            "ref_block_prefix": self.ref_block_prefix,
            "max_net_usage_words": self.max_net_usage_words,
            "max_cpu_usage_ms": self.max_cpu_usage_ms,
            "delay_sec": self.delay_sec,
            "context_free_actions": [a.to_dict() for a in self.context_free_actions],
            "actions": [a.to_dict() for a in self.actions],
            "transaction_extensions": [],
        }
