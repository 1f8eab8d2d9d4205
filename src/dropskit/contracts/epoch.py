"""
Epoch contract accessor (``epoch.drops``).

Epochs are fixed-length periods. Registered oracles commit to a secret
(``sha256(reveal)``) while an epoch runs and reveal it once it has ended;
the epoch value is derived from all reveals once the epoch completes.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Any, Optional

from ..chain.tx import Action, PermissionLevel
from .base import Contract, Table

EPOCH_ACCOUNT = "epoch.drops"


@dataclass(frozen=True)
class EpochRow:
    epoch: int
    start: str
    end: str
    oracles: list[str] = field(default_factory=list)
    completed: int = 0

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "EpochRow":
        return cls(
            epoch=int(row["epoch"]),
            start=row["start"],
            end=row["end"],
            oracles=list(row.get("oracles", [])),
            completed=int(row.get("completed", 0)),
        )

    @property
    def is_completed(self) -> bool:
        return self.completed != 0


@dataclass(frozen=True)
class OracleRow:
    oracle: str

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "OracleRow":
        return cls(oracle=row["oracle"])


@dataclass(frozen=True)
class CommitRow:
    id: int
    epoch: int
    oracle: str
    commit: str

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "CommitRow":
        return cls(id=int(row["id"]), epoch=int(row["epoch"]), oracle=row["oracle"], commit=row["commit"])


@dataclass(frozen=True)
class RevealRow:
    id: int
    epoch: int
    oracle: str
    reveal: str

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "RevealRow":
        return cls(id=int(row["id"]), epoch=int(row["epoch"]), oracle=row["oracle"], reveal=row["reveal"])


@dataclass(frozen=True)
class SubscriberRow:
    subscriber: str

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "SubscriberRow":
        return cls(subscriber=row["subscriber"])


@dataclass(frozen=True)
class EpochStateRow:
    id: int
    epoch: int
    enabled: bool

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> "EpochStateRow":
        return cls(id=int(row["id"]), epoch=int(row["epoch"]), enabled=bool(row["enabled"]))


def commit_hash(reveal: str) -> str:
    """Commit value for a reveal: hex sha256 of the reveal string."""
    return hashlib.sha256(reveal.encode("utf-8")).hexdigest()


class EpochContract(Contract):
    account = EPOCH_ACCOUNT

    STATE_ID = 1

    # ============ Tables ============

    @property
    def epochs_table(self) -> Table[EpochRow]:
        return self.table("epochs", row_type=EpochRow.from_dict)

    @property
    def oracles_table(self) -> Table[OracleRow]:
        return self.table("oracles", row_type=OracleRow.from_dict)

    @property
    def commits_table(self) -> Table[CommitRow]:
        return self.table("commits", row_type=CommitRow.from_dict)

    @property
    def reveals_table(self) -> Table[RevealRow]:
        return self.table("reveals", row_type=RevealRow.from_dict)

    @property
    def subscribers_table(self) -> Table[SubscriberRow]:
        return self.table("subscribers", row_type=SubscriberRow.from_dict)

    @property
    def state_table(self) -> Table[EpochStateRow]:
        return self.table("state", row_type=EpochStateRow.from_dict)

    def get_state(self) -> Optional[EpochStateRow]:
        return self.state_table.get(self.STATE_ID)

    def get_epoch(self, epoch: int) -> Optional[EpochRow]:
        return self.epochs_table.get(epoch)

    def current_epoch(self) -> Optional[EpochRow]:
        state = self.get_state()
        if state is None:
            return None
        return self.get_epoch(state.epoch)

    def oracles(self) -> list[str]:
        return [row.oracle for row in self.oracles_table.all()]

    # ============ Actions ============

    def advance(self, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("advance", {}, authorization)

    def commit(
        self,
        oracle: str,
        epoch: int,
        reveal: str,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        """Commit to ``reveal`` for ``epoch``; only the hash goes on chain."""
        return self.action(
            "commit",
            {"oracle": oracle, "epoch": epoch, "commit": commit_hash(reveal)},
            authorization,
        )

    def reveal(
        self,
        oracle: str,
        epoch: int,
        reveal: str,
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        return self.action("reveal", {"oracle": oracle, "epoch": epoch, "reveal": reveal}, authorization)

    def finishreveal(self, epoch: int, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("finishreveal", {"epoch": epoch}, authorization)

    def addoracle(self, oracle: str, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("addoracle", {"oracle": oracle}, authorization)

    def removeoracle(self, oracle: str, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("removeoracle", {"oracle": oracle}, authorization)

    def subscribe(self, subscriber: str, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("subscribe", {"subscriber": subscriber}, authorization)

    def unsubscribe(self, subscriber: str, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("unsubscribe", {"subscriber": subscriber}, authorization)

    def enable(self, enabled: bool, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("enable", {"enabled": enabled}, authorization)

    def init(self, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("init", {}, authorization)

    def computeepoch(self, epoch: int, authorization: Optional[list[PermissionLevel]] = None) -> Action:
        return self.action("computeepoch", {"epoch": epoch}, authorization)
