"""
Shared fixtures: a fake Antelope API node served through httpx.MockTransport.

The fake node answers get_info, get_abi, get_table_rows and
push_transaction from in-memory data and records every request, so tests
never touch the network.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any, Optional

import httpx
import pytest

from dropskit.chain.chains import Chains
from dropskit.chain.rpc import APIClient

# Well-known Antelope development key pair.
DEV_PRIVATE_KEY = "5KQwrPbwdL6PhXujxW37FSSQZ1JiwsST4cqQzDeyXtP79zkvFD3"
DEV_PUBLIC_KEY = "EOS6MRyAjQq8ud7hVNYcfnVPJqcVpscN5So8BhtHuGYqET5GDW5CV"

ENDPOINT = "https://jungle4.greymass.com"

# Block id bytes 8..12 (0x11223344 little-endian) become the ref_block_prefix.
LIB_BLOCK_ID = "000003de" + "00000000" + "11223344" + "00" * 20

CHAIN_INFO = {
    "server_version_string": "v5.0.2",
    "chain_id": Chains.Jungle4.id,
    "head_block_num": 1000,
    "head_block_time": "2024-01-01T00:00:00.000",
    "last_irreversible_block_num": 990,
    "last_irreversible_block_id": LIB_BLOCK_ID,
}


def _struct(name: str, *fields: tuple[str, str]) -> dict[str, Any]:
    return {"name": name, "base": "", "fields": [{"name": n, "type": t} for n, t in fields]}


def _abi(*structs: dict[str, Any]) -> dict[str, Any]:
    return {
        "version": "eosio::abi/1.2",
        "types": [],
        "structs": list(structs),
        "actions": [{"name": s["name"], "type": s["name"], "ricardian_contract": ""} for s in structs],
        "tables": [],
        "variants": [],
    }


TOKEN_ABI = _abi(
    _struct("transfer", ("from", "name"), ("to", "name"), ("quantity", "asset"), ("memo", "string")),
)

DROPS_ABI = _abi(
    _struct("transfer", ("from", "name"), ("to", "name"), ("drops_ids", "uint64[]"), ("memo", "string")),
    _struct("destroy", ("owner", "name"), ("drops_ids", "uint64[]"), ("memo", "string")),
    _struct("destroyall"),
    _struct("enroll", ("account", "name"), ("epoch", "uint64")),
    _struct("enable", ("enabled", "bool")),
    _struct("init"),
    _struct("computedrops", ("epoch", "uint64"), ("drops", "uint64")),
    _struct("cmplastepoch", ("drops", "uint64"), ("contract", "name")),
)

EPOCH_ABI = _abi(
    _struct("advance"),
    _struct("commit", ("oracle", "name"), ("epoch", "uint64"), ("commit", "checksum256")),
    _struct("reveal", ("oracle", "name"), ("epoch", "uint64"), ("reveal", "string")),
    _struct("finishreveal", ("epoch", "uint64")),
    _struct("addoracle", ("oracle", "name")),
    _struct("removeoracle", ("oracle", "name")),
    _struct("subscribe", ("subscriber", "name")),
    _struct("unsubscribe", ("subscriber", "name")),
    _struct("enable", ("enabled", "bool")),
    _struct("init"),
    _struct("computeepoch", ("epoch", "uint64")),
)


class FakeChain:
    """In-memory API node."""

    def __init__(self) -> None:
        self.info = dict(CHAIN_INFO)
        self.abis: dict[str, dict[str, Any]] = {
            "eosio.token": TOKEN_ABI,
            "drops": DROPS_ABI,
            "epoch.drops": EPOCH_ABI,
        }
        # (code, table) -> ordered {primary key: row}
        self.tables: dict[tuple[str, str], dict[str, dict[str, Any]]] = {}
        self.requests: list[tuple[str, dict[str, Any]]] = []
        self.pushed: list[dict[str, Any]] = []
        self.error: Optional[tuple[int, dict[str, Any]]] = None

    def add_rows(self, code: str, table: str, key_field: str, *rows: dict[str, Any]) -> None:
        target = self.tables.setdefault((code, table), {})
        for row in rows:
            target[str(row[key_field])] = row

    def paths(self) -> list[str]:
        return [path for path, _ in self.requests]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        payload = json.loads(request.content or b"{}")
        self.requests.append((path, payload))

        if self.error is not None:
            status, body = self.error
            return httpx.Response(status, json=body)

        if path == "/v1/chain/get_info":
            return httpx.Response(200, json=self.info)
        if path == "/v1/chain/get_abi":
            account = payload["account_name"]
            return httpx.Response(200, json={"account_name": account, "abi": self.abis.get(account)})
        if path == "/v1/chain/get_table_rows":
            return httpx.Response(200, json=self._table_rows(payload))
        if path == "/v1/chain/push_transaction":
            self.pushed.append(payload)
            trx_id = hashlib.sha256(bytes.fromhex(payload["packed_trx"])).hexdigest()
            return httpx.Response(200, json={"transaction_id": trx_id, "processed": {"id": trx_id}})
        return httpx.Response(404, json={"code": 404, "message": "Not Found"})

    def _table_rows(self, payload: dict[str, Any]) -> dict[str, Any]:
        rows = self.tables.get((payload["code"], payload["table"]), {})
        keys = list(rows)
        lower, upper = payload.get("lower_bound"), payload.get("upper_bound")

        if lower is not None and lower == upper:
            return {"rows": [rows[lower]] if lower in rows else [], "more": False, "next_key": ""}

        start = keys.index(lower) if lower in keys else 0
        limit = payload.get("limit", 10)
        page = keys[start:start + limit]
        more = start + limit < len(keys)
        return {
            "rows": [rows[k] for k in page],
            "more": more,
            "next_key": keys[start + limit] if more else "",
        }


@pytest.fixture()
def fake_chain() -> FakeChain:
    return FakeChain()


@pytest.fixture()
def transport(fake_chain: FakeChain) -> httpx.MockTransport:
    return httpx.MockTransport(fake_chain.handler)


@pytest.fixture()
def client(transport: httpx.MockTransport) -> APIClient:
    return APIClient(ENDPOINT, transport=transport)
