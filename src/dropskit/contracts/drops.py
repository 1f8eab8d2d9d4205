"""
Drops contract accessor.

Drops are minted by sending system tokens to the contract with a memo of
``"<amount>,<data>"``; the contract buys the RAM needed for the new rows and
refunds the remainder. Each drop id is derived from the memo data::

    drop_id(i) = uint64_le(sha256(str(i) + data)[:8])   for i in range(amount)
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass
from typing import Any, Optional, Sequence

from ..chain.tx import Action, PermissionLevel
from .base import Contract, Table

DROPS_ACCOUNT = "drops"
TOKEN_CONTRACT = "eosio.token"
MIN_DATA_LENGTH = 33


@dataclass(frozen=True)
class DropRow:
    drops: int
    owner: str
    epoch: int

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "DropRow":
        return cls(drops=int(row["drops"]), owner=row["owner"], epoch=int(row["epoch"]))


@dataclass(frozen=True)
class AccountRow:
    account: str
    drops: int

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "AccountRow":
        return cls(account=row["account"], drops=int(row["drops"]))


@dataclass(frozen=True)
class StatRow:
    id: int
    account: str
    epoch: int
    drops: int

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "StatRow":
        return cls(
            id=int(row["id"]),
            account=row["account"],
            epoch=int(row["epoch"]),
            drops=int(row["drops"]),
        )


@dataclass(frozen=True)
class StateRow:
    id: int
    epoch: int
    enabled: bool

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "StateRow":
        return cls(id=int(row["id"]), epoch=int(row["epoch"]), enabled=bool(row["enabled"]))


@dataclass(frozen=True)
class EpochDropRow:
    """Resolved value of a completed epoch, combined with a drop id by ``computedrops``."""

    epoch: int
    drops: str

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "EpochDropRow":
        return cls(epoch=int(row["epoch"]), drops=row["drops"])

def drop_ids(amount: int, data: str) -> list[int]:
    """Predict the ids of the drops a generate memo will mint."""
    ids = []
    for i in range(amount):
        digest = hashlib.sha256(f"{i}{data}".encode("utf-8")).digest()
        ids.append(struct.unpack("<Q", digest[:8])[0])
    return ids


def generate_memo(amount: int, data: str) -> str:
    """
    Build the transfer memo that mints drops.

    Raises:
        ValueError: If the contract would reject the memo
    """
    if amount <= 0:
        raise ValueError("The amount of drops to generate must be a positive value.")
    if len(data.encode("utf-8")) < MIN_DATA_LENGTH:
        raise ValueError(f"Drop data must be more than {MIN_DATA_LENGTH - 1} characters (UTF-8 bytes) in length.")
    if "," in data:
        raise ValueError("Drop data must not contain a comma.")
    return f"{amount},{data}"


class DropsContract(Contract):
    account = DROPS_ACCOUNT

    STATE_ID = 1

    # ============ Tables ============

    @property
    def drop_table(self) -> Table[DropRow]:
        return self.table("drop", row_type=DropRow.from_dict)

    @property
    def accounts_table(self) -> Table[AccountRow]:
        return self.table("accounts", row_type=AccountRow.from_dict)

    @property
    def stats_table(self) -> Table[StatRow]:
        return self.table("stats", row_type=StatRow.from_dict)

    @property
    def state_table(self) -> Table[StateRow]:
        return self.table("state", row_type=StateRow.from_dict)

    @property
    def epochdrop_table(self) -> Table[EpochDropRow]:
        return self.table("epochdrop", row_type=EpochDropRow.from_dict)

    def get_drop(self, drop_id: int) -> Optional[DropRow]:
        return self.drop_table.get(drop_id)

    def get_account(self, account: str) -> Optional[AccountRow]:
        return self.accounts_table.get(account)

    def get_state(self) -> Optional[StateRow]:
        return self.state_table.get(self.STATE_ID)

    def get_epoch_drops(self, epoch: int) -> Optional[EpochDropRow]:
        return self.epochdrop_table.get(epoch)

    def balance(self, account: str) -> int:
        row = self.get_account(account)
        return row.drops if row else 0

    # ============ Actions ============

    def generate(
        self,
        owner: str,
        amount: int,
        data: str,
        quantity: str,
        token_contract: str = TOKEN_CONTRACT,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        """
        Build the token transfer that mints ``amount`` drops for ``owner``.

        Args:
            owner: Paying account, becomes the owner of the drops
            amount: Number of drops to mint
            data: Seed data (more than 32 characters, no commas)
            quantity: Tokens sent to cover RAM (e.g. "1.0000 EOS")
            token_contract: System token contract
        """
        memo = generate_memo(amount, data)
        token = Contract(self.client, token_contract)
        return token.action(
            "transfer",
            {"from": owner, "to": self.account, "quantity": quantity, "memo": memo},
            authorization,
        )

    def transfer(
        self,
        from_: str,
        to: str,
        drops_ids: Sequence[int],
        memo: str = "",
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        if not drops_ids:
            raise ValueError("No drops were provided to transfer.")
        return self.action(
            "transfer",
            {"from": from_, "to": to, "drops_ids": list(drops_ids), "memo": memo},
            authorization,
        )

    def destroy(
        self,
        owner: str,
        drops_ids: Sequence[int],
        memo: str = "",
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        if not drops_ids:
            raise ValueError("No drops were provided to destroy.")
        return self.action(
            "destroy",
            {"owner": owner, "drops_ids": list(drops_ids), "memo": memo},
            authorization,
        )

    def destroyall(self, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("destroyall", {}, authorization)

    def enroll(
        self,
        account: str,
        epoch: int,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        return self.action("enroll", {"account": account, "epoch": epoch}, authorization)

    def enable(self, enabled: bool, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("enable", {"enabled": enabled}, authorization)

    def init(self, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("init", {}, authorization)

    def computedrops(
        self,
        epoch: int,
        drops: int,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        return self.action("computedrops", {"epoch": epoch, "drops": drops}, authorization)

    def cmplastepoch(
        self,
        drops: int,
        contract: str,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        return self.action("cmplastepoch", {"drops": drops, "contract": contract}, authorization)
