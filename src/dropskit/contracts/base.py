"""
Contract accessors - bind a contract account to an API client.

A contract exposes its actions (serialized with the ABI fetched from chain)
and its tables (queried through ``get_table_rows``).
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, Optional, TypeVar

from ..chain.abi import AbiSerializer
from ..chain.rpc import APIClient
from ..chain.tx import Action, PermissionLevel

RowT = TypeVar("RowT")


class Table(Generic[RowT]):
    """
    A contract table in one scope.

    Args:
        client: API client
        code: Contract account
        name: Table name
        scope: Table scope (default: the contract account)
        row_type: Callable building a typed row from the JSON dict
    """

    def __init__(
        self,
        client: APIClient,
        code: str,
        name: str,
        scope: Optional[str] = None,
        row_type: Optional[Callable[[dict[str, Any]], RowT]] = None,
    ) -> None:
        self.client = client
        self.code = code
        self.name = name
        self.scope = scope or code
        self.row_type = row_type

    def _convert(self, row: dict[str, Any]) -> Any:
        return self.row_type(row) if self.row_type else row

    def query(
        self,
        lower_bound: Optional[Any] = None,
        upper_bound: Optional[Any] = None,
        limit: int = 100,
        index_position: Optional[str] = None,
        key_type: Optional[str] = None,
        reverse: bool = False,
    ) -> tuple[list[RowT], Optional[str]]:
        """
        Fetch one page of rows.

        Returns:
            Tuple of (rows, next_key); next_key is None on the last page
        """
        result = self.client.get_table_rows(
            self.code,
            self.name,
            scope=self.scope,
            lower_bound=lower_bound,
            upper_bound=upper_bound,
            limit=limit,
            index_position=index_position,
            key_type=key_type,
            reverse=reverse,
        )
        rows = [self._convert(row) for row in result.get("rows", [])]
        next_key = result.get("next_key") if result.get("more") else None
        return rows, next_key or None

    def get(
        self,
        key: Any,
        index_position: Optional[str] = None,
        key_type: Optional[str] = None,
    ) -> Optional[RowT]:
        """Fetch the row with the given key, or None."""
        rows, _ = self.query(
            lower_bound=key,
            upper_bound=key,
            limit=1,
            index_position=index_position,
            key_type=key_type,
        )
        return rows[0] if rows else None

    def all(
        self,
        lower_bound: Optional[Any] = None,
        upper_bound: Optional[Any] = None,
        page_size: int = 100,
        index_position: Optional[str] = None,
        key_type: Optional[str] = None,
    ) -> Iterator[RowT]:
        """Iterate over every row, following ``next_key`` pagination."""
        cursor = lower_bound
        while True:
            rows, next_key = self.query(
                lower_bound=cursor,
                upper_bound=upper_bound,
                limit=page_size,
                index_position=index_position,
                key_type=key_type,
            )
            yield from rows
            if next_key is None:
                return
            cursor = next_key


class Contract:
    """
    Generic contract accessor.

    Args:
        account: Contract account name
        client: API client shared with other accessors
    """

    account: str = ""

    def __init__(self, client: APIClient, account: Optional[str] = None) -> None:
        self.client = client
        if account is not None:
            self.account = account
        if not self.account:
            raise ValueError("Contract account is required")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(account={self.account!r}, client={self.client!r})"

    @property
    def abi(self) -> dict[str, Any]:
        return self.client.get_abi(self.account)

    @property
    def serializer(self) -> AbiSerializer:
        return AbiSerializer(self.abi, self.account)

    def action(
        self,
        name: str,
        data: dict[str, Any],
        authorization: Optional[list[PermissionLevel]] = None,
    ) -> Action:
        """
        Build an action with ABI serialized data.

        Args:
            name: Action name
            data: Action fields
            authorization: Permission levels (default: filled in by the session)

        Returns:
            Action ready to be passed to ``Session.transact``
        """
        return Action(
            account=self.account,
            name=name,
            data=self.serializer.encode_action_data(name, data),
            authorization=list(authorization or []),
        )

    def table(
        self,
        name: str,
        scope: Optional[str] = None,
        row_type: Optional[Callable[[dict[str, Any]], Any]] = None,
    ) -> Table:
        return Table(self.client, self.account, name, scope=scope, row_type=row_type)
