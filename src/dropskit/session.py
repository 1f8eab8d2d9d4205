"""
Session - Sign and submit transactions as one actor@permission.

A session binds a chain definition, a wallet plugin, an actor and a
permission. Transacting resolves the reference block, serializes the
transaction, asks the wallet plugin for a signature and pushes the
result to the chain API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from .chain.chains import ChainDefinition
from .chain.rpc import APIClient
from .chain.tx import Action, PermissionLevel, Transaction
from .sigil.wallet import WalletPlugin

logger = logging.getLogger(__name__)

DEFAULT_EXPIRE_SECONDS = 120


class ChainMismatchError(RuntimeError):
    """API node serves a different chain than the session is bound to."""


@dataclass
class TransactResult:
    transaction: Transaction
    transaction_id: str
    signatures: list[str]
    packed_trx: str
    response: Optional[dict[str, Any]] = field(default=None)


class Session:
    """
    Transaction submission handle for a single actor and permission.

    Args:
        chain: Chain the transactions are signed for
        wallet_plugin: Signing capability
        actor: Account name transactions are authorized by
        permission: Permission name of the actor
        client: API client (default: a new client for ``chain.url``)
    """

    def __init__(
        self,
        chain: ChainDefinition,
        wallet_plugin: WalletPlugin,
        actor: str,
        permission: str,
        client: Optional[APIClient] = None,
    ) -> None:
        self.chain = chain
        self.wallet_plugin = wallet_plugin
        self.actor = actor
        self.permission = permission
        self.client = client if client is not None else APIClient(chain.url)

    def __repr__(self) -> str:
        return f"Session({self.actor}@{self.permission} on {self.chain.name or self.chain.id})"

    @property
    def permission_level(self) -> PermissionLevel:
        return PermissionLevel(actor=self.actor, permission=self.permission)

    def _authorize(self, action: Action) -> Action:
        if action.authorization:
            return action
        return Action(
            account=action.account,
            name=action.name,
            data=action.data,
            authorization=[self.permission_level],
        )

    def build(
        self,
        actions: Sequence[Action],
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
    ) -> Transaction:
        """
        Build an unsigned transaction against the current chain state.

        Actions without an authorization are authorized by this session.

        Raises:
            ChainMismatchError: If the API node reports another chain id
        """
        if not actions:
            raise ValueError("At least one action is required")

        info = self.client.get_info()
        if info.get("chain_id") != self.chain.id:
            raise ChainMismatchError(
                f"API node {self.client.url} serves chain {info.get('chain_id')}, "
                f"session expects {self.chain.id}"
            )

        return Transaction.from_chain_info(
            info,
            actions=[self._authorize(action) for action in actions],
            expire_seconds=expire_seconds,
        )

    def transact(
        self,
        actions: Sequence[Action],
        broadcast: bool = True,
        expire_seconds: int = DEFAULT_EXPIRE_SECONDS,
    ) -> TransactResult:
        """
        Build, sign and (optionally) broadcast a transaction.

        Args:
            actions: Actions to include, in order
            broadcast: Push the signed transaction to the API node
            expire_seconds: Transaction lifetime after head block time

        Returns:
            TransactResult with id, signatures and the node response
        """
        transaction = self.build(actions, expire_seconds=expire_seconds)
        digest = transaction.signing_digest(self.chain.id)
        signature = self.wallet_plugin.sign(self.chain, digest)

        result = TransactResult(
            transaction=transaction,
            transaction_id=transaction.id(),
            signatures=[signature.to_string()],
            packed_trx=transaction.pack().hex(),
        )
        logger.info(
            "Signed transaction %s (%d actions) as %s@%s",
            result.transaction_id,
            len(transaction.actions),
            self.actor,
            self.permission,
        )

        if broadcast:
            result.response = self.client.push_transaction(result.signatures, result.packed_trx)
            logger.info("Broadcast transaction %s", result.transaction_id)

        return result
