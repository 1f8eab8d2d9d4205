"""
Chain API Client for Antelope nodes.

Thin wrapper over the ``/v1/chain/*`` HTTP API using httpx.
Supports chain info, ABI lookup, table queries and transaction push.

No connection is opened when the client is constructed: the underlying
``httpx.Client`` is created on the first request.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class APIError(RuntimeError):
    """Chain API returned an error response."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[int] = None,
        name: Optional[str] = None,
        details: Optional[list] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.name = name
        self.details = details or []

    @classmethod
    def from_response(cls, response: httpx.Response) -> "APIError":
        """Build an error from an Antelope error body.

        Error bodies look like::

            {"code": 500, "message": "Internal Service Error",
             "error": {"code": 3050003, "name": "eosio_assert_message_exception",
                       "what": "eosio_assert_message assertion failure",
                       "details": [{"message": "assertion failure with message: ..."}]}}
        """
        try:
            body = response.json()
        except ValueError:
            body = None

        if not isinstance(body, dict):
            return cls(
                f"HTTP {response.status_code} from {response.request.url}",
                status=response.status_code,
            )

        error = body.get("error") or {}
        details = error.get("details") or []
        if details and details[0].get("message"):
            message = details[0]["message"]
        else:
            message = error.get("what") or body.get("message") or f"HTTP {response.status_code}"

        return cls(
            message,
            status=response.status_code,
            code=error.get("code"),
            name=error.get("name"),
            details=details,
        )


class APIClient:
    """
    Client for the Antelope chain API.

    Args:
        url: Base URL of the API node (kept exactly as given)
        timeout: Request timeout in seconds
        transport: Optional httpx transport (tests use ``httpx.MockTransport``)
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.Client] = None
        self._abi_cache: dict[str, dict[str, Any]] = {}

    def __repr__(self) -> str:
        return f"APIClient(url={self.url!r})"

    def __enter__(self) -> "APIClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    @property
    def http(self) -> httpx.Client:
        if self._http is None:
            self._http = httpx.Client(timeout=self.timeout, transport=self._transport)
        return self._http

    def close(self) -> None:
        if self._http is not None:
            self._http.close()
            self._http = None

    def call(self, path: str, payload: Optional[dict[str, Any]] = None) -> Any:
        """
        POST a JSON payload to an API path.

        Args:
            path: API path (e.g., "/v1/chain/get_info")
            payload: JSON body

        Returns:
            Decoded JSON response

        Raises:
            APIError: If the node answers with a non-2xx status
        """
        endpoint = self.url.rstrip("/") + path
        logger.debug("POST %s %s", endpoint, payload)

        response = self.http.post(endpoint, json=payload if payload is not None else {})
        if response.is_error:
            error = APIError.from_response(response)
            logger.debug("API error from %s: %s", endpoint, error)
            raise error

        return response.json()

    # ============ /v1/chain ============

    def get_info(self) -> dict[str, Any]:
        return self.call("/v1/chain/get_info")

    def get_account(self, account_name: str) -> dict[str, Any]:
        return self.call("/v1/chain/get_account", {"account_name": account_name})

    def get_abi(self, account_name: str) -> dict[str, Any]:
        """
        Get the ABI of a contract account (cached per client).

        Raises:
            APIError: If the account has no contract deployed
        """
        if account_name not in self._abi_cache:
            result = self.call("/v1/chain/get_abi", {"account_name": account_name})
            abi = result.get("abi")
            if not abi:
                raise APIError(f"No ABI deployed on {account_name}")
            self._abi_cache[account_name] = abi
        return self._abi_cache[account_name]

    def get_table_rows(
        self,
        code: str,
        table: str,
        scope: Optional[str] = None,
        lower_bound: Optional[Any] = None,
        upper_bound: Optional[Any] = None,
        limit: int = 10,
        index_position: Optional[str] = None,
        key_type: Optional[str] = None,
        reverse: bool = False,
    ) -> dict[str, Any]:
        """
        Query rows of a contract table.

        Args:
            code: Contract account
            table: Table name
            scope: Table scope (default: the contract account)
            lower_bound: Inclusive lower key bound
            upper_bound: Inclusive upper key bound
            limit: Maximum rows returned
            index_position: "primary", "secondary", ... or "1", "2", ...
            key_type: Index key type ("i64", "name", "sha256", ...)
            reverse: Iterate in descending order

        Returns:
            Dict with ``rows``, ``more`` and ``next_key``
        """
        payload: dict[str, Any] = {
            "code": code,
            "table": table,
            "scope": scope or code,
            "json": True,
            "limit": limit,
            "reverse": reverse,
        }
        if lower_bound is not None:
            payload["lower_bound"] = str(lower_bound)
        if upper_bound is not None:
            payload["upper_bound"] = str(upper_bound)
        if index_position is not None:
            payload["index_position"] = index_position
        if key_type is not None:
            payload["key_type"] = key_type
        return self.call("/v1/chain/get_table_rows", payload)

    def push_transaction(
        self,
        signatures: list[str],
        packed_trx: str,
        packed_context_free_data: str = "",
    ) -> dict[str, Any]:
        """
        Push a signed, packed transaction.

        Args:
            signatures: ``SIG_K1_...`` signatures
            packed_trx: Hex encoded serialized transaction

        Returns:
            Node response (``transaction_id`` and ``processed`` traces)
        """
        return self.call(
            "/v1/chain/push_transaction",
            {
                "signatures": signatures,
                "compression": 0,
                "packed_context_free_data": packed_context_free_data,
                "packed_trx": packed_trx,
            },
        )
