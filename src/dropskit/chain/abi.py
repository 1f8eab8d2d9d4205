"""
ABI Serializer - Binary encoding of Antelope action data.

Contract ABIs are fetched at runtime from the chain (``get_abi``) and parsed
into antelopy's ABI model; primitive values are packed with antelopy's
serializers. This module walks the ABI on top of that:

- typedefs are resolved, structs are written field by field (base first)
- ``T[]``  vector (varuint32 length prefix)
- ``T?``   optional (uint8 presence flag)
- ``T$``   binary extension (may be omitted at the tail of a struct)

Values are checked before they reach antelopy, which packs whatever it is
given. Only encoding is implemented: table rows and traces are requested
from the chain API as JSON.
"""

from __future__ import annotations

import re
import struct
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable

from antelopy.exceptions.exceptions import SerializationError as AntelopySerializationError
from antelopy.types.abi import Abi, AbiStructField
from antelopy.types.serializers import (
    BooleanSerializer,
    BytesSerializer,
    ChecksumSerializer,
    ListSerializer,
    NameSerializer,
    NumberSerializer,
    SymbolCodeSerializer,
    SymbolSerializer,
    TimePointSecSerializer,
    VaruintSerializer,
)
from pydantic import ValidationError

from .names import is_valid_name


class SerializationError(ValueError):
    """Value could not be encoded for the requested ABI type."""


# Antelope block timestamps count half-second slots from 2000-01-01.
BLOCK_TIMESTAMP_EPOCH_MS = 946684800000
BLOCK_INTERVAL_MS = 500

SYMBOL_CODE_PATTERN = re.compile(r"[A-Z]{1,7}")
ASSET_AMOUNT_PATTERN = re.compile(r"-?\d+(\.\d+)?")

INTEGER_TYPES = {
    "int8": (8, True),
    "uint8": (8, False),
    "int16": (16, True),
    "uint16": (16, False),
    "int32": (32, True),
    "uint32": (32, False),
    "int64": (64, True),
    "uint64": (64, False),
    "int128": (128, True),
    "uint128": (128, False),
}


# ============ Value checks ============


def _integer(value: Any, type_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise SerializationError(f"{type_name} expects an integer, got {value!r}")
    try:
        number = int(value)
    except ValueError as exc:
        raise SerializationError(f"{type_name} expects an integer, got {value!r}") from exc

    bits, signed = INTEGER_TYPES.get(type_name, (32, type_name == "varint32"))
    low, high = (-(1 << (bits - 1)), 1 << (bits - 1)) if signed else (0, 1 << bits)
    if not low <= number < high:
        raise SerializationError(f"{value!r} does not fit {type_name}")
    return number


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value)
        except ValueError as exc:
            raise SerializationError(f"Invalid hex string: {value!r}") from exc
    raise SerializationError(f"Expected bytes or hex string, got {value!r}")


def _symbol_code(code: Any) -> str:
    if not isinstance(code, str) or not SYMBOL_CODE_PATTERN.fullmatch(code):
        raise SerializationError(f"Invalid symbol code: {code!r}")
    return code


def _parse_time(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.rstrip("Z"))
        except ValueError as exc:
            raise SerializationError(f"Invalid time value: {value!r}") from exc
    else:
        raise SerializationError(f"Expected ISO time string or datetime, got {value!r}")
    # Chain timestamps are always UTC and carry no offset.
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def parse_asset(value: str) -> tuple[int, int, str]:
    """Split ``"1.0000 EOS"`` into ``(10000, 4, "EOS")``.

    Raises:
        SerializationError: If the amount or symbol code is malformed
    """
    try:
        amount, code = value.strip().split(" ")
    except (AttributeError, ValueError) as exc:
        raise SerializationError(f"Invalid asset: {value!r}") from exc
    if not ASSET_AMOUNT_PATTERN.fullmatch(amount):
        raise SerializationError(f"Invalid asset amount: {value!r}")
    precision = len(amount.split(".")[1]) if "." in amount else 0
    return int(Decimal(amount).scaleb(precision)), precision, _symbol_code(code)


# ============ Built-in types ============


def _serialize_integer(type_name: str) -> Callable[[Any], bytes]:
    serializer = NumberSerializer(type_name)

    def serialize(value: Any) -> bytes:
        return serializer.serialize(_integer(value, type_name))

    return serialize


def _serialize_float(type_name: str) -> Callable[[Any], bytes]:
    serializer = NumberSerializer(type_name)

    def serialize(value: Any) -> bytes:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise SerializationError(f"{type_name} expects a number, got {value!r}")
        return serializer.serialize(float(value))

    return serialize


def _serialize_varuint32(value: Any) -> bytes:
    return VaruintSerializer().serialize(_integer(value, "varuint32"))


def _serialize_varint32(value: Any) -> bytes:
    number = _integer(value, "varint32")
    return VaruintSerializer().serialize(((number << 1) ^ (number >> 31)) & 0xFFFFFFFF)


def _serialize_bool(value: Any) -> bytes:
    if not isinstance(value, bool):
        raise SerializationError(f"Expected bool, got {value!r}")
    return BooleanSerializer().serialize(value)


def _serialize_string(value: Any) -> bytes:
    if not isinstance(value, str):
        raise SerializationError(f"Expected string, got {value!r}")
    # Length prefix counts UTF-8 bytes, not characters.
    return BytesSerializer().serialize(value.encode("utf-8"))


def _serialize_bytes(value: Any) -> bytes:
    return BytesSerializer().serialize(_to_bytes(value))


def _serialize_checksum(size: int) -> Callable[[Any], bytes]:
    def serialize(value: Any) -> bytes:
        raw = _to_bytes(value)
        if len(raw) != size:
            raise SerializationError(f"checksum{size * 8} requires {size} bytes, got {len(raw)}")
        return ChecksumSerializer().serialize(raw.hex())

    return serialize


def serialize_name(value: Any) -> bytes:
    if not isinstance(value, str) or not is_valid_name(value):
        raise SerializationError(f"Invalid name: {value!r}")
    return bytes(NameSerializer().serialize(value))


def _serialize_time_point(value: Any) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        micros = value
    else:
        delta = _parse_time(value) - datetime(1970, 1, 1, tzinfo=timezone.utc)
        micros = (delta.days * 86400 + delta.seconds) * 1_000_000 + delta.microseconds
    return _serialize_integer("int64")(micros)


def _serialize_time_point_sec(value: Any) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        seconds = value
    else:
        seconds = int(_parse_time(value).timestamp())
    return TimePointSecSerializer().serialize(_integer(seconds, "uint32"))


def _serialize_block_timestamp(value: Any) -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        slot = value
    else:
        ms = int(_parse_time(value).timestamp() * 1000)
        slot = (ms - BLOCK_TIMESTAMP_EPOCH_MS) // BLOCK_INTERVAL_MS
    return _serialize_integer("uint32")(slot)


def _serialize_symbol_code(value: Any) -> bytes:
    # symbol_code is a uint64 on its own, 7 bytes only inside a symbol
    return SymbolCodeSerializer().serialize(_symbol_code(value)).ljust(8, b"\x00")


def _serialize_symbol(value: Any) -> bytes:
    try:
        precision, code = str(value).split(",")
        precision_value = int(precision)
    except ValueError as exc:
        raise SerializationError(f"Invalid symbol: {value!r}") from exc
    if not 0 <= precision_value <= 18:
        raise SerializationError(f"Invalid symbol precision: {value!r}")
    return SymbolSerializer().serialize(f"{precision_value},{_symbol_code(code)}")


def _serialize_asset(value: Any) -> bytes:
    if not isinstance(value, str):
        raise SerializationError(f"Expected asset string, got {value!r}")
    amount, precision, code = parse_asset(value)
    return _serialize_integer("int64")(amount) + _serialize_symbol(f"{precision},{code}")


def _serialize_extended_asset(value: Any) -> bytes:
    if not isinstance(value, dict):
        raise SerializationError(f"Expected extended_asset object, got {value!r}")
    return _serialize_asset(value.get("quantity")) + serialize_name(value.get("contract"))


BUILTIN_SERIALIZERS: dict[str, Callable[[Any], bytes]] = {
    **{type_name: _serialize_integer(type_name) for type_name in INTEGER_TYPES},
    "bool": _serialize_bool,
    "varint32": _serialize_varint32,
    "varuint32": _serialize_varuint32,
    "float32": _serialize_float("float32"),
    "float64": _serialize_float("float64"),
    "name": serialize_name,
    "string": _serialize_string,
    "bytes": _serialize_bytes,
    "checksum160": _serialize_checksum(20),
    "checksum256": _serialize_checksum(32),
    "checksum512": _serialize_checksum(64),
    "time_point": _serialize_time_point,
    "time_point_sec": _serialize_time_point_sec,
    "block_timestamp_type": _serialize_block_timestamp,
    "symbol": _serialize_symbol,
    "symbol_code": _serialize_symbol_code,
    "asset": _serialize_asset,
    "extended_asset": _serialize_extended_asset,
}


def _field_type(field: AbiStructField) -> str:
    # antelopy strips a trailing [] into is_list
    return f"{field.type}[]" if field.is_list else field.type


# ============ ABI-driven serializer ============


class AbiSerializer:
    """Encode values according to a contract ABI (as returned by ``get_abi``).

    Args:
        abi: ABI definition
        account: Contract account the ABI belongs to
    """

    MAX_TYPEDEF_DEPTH = 32

    def __init__(self, abi: dict[str, Any], account: str = "") -> None:
        try:
            self.abi = Abi(name=account, **abi)
        except ValidationError as exc:
            raise SerializationError(f"Malformed ABI for {account or 'contract'}: {exc}") from exc

    def resolve(self, type_name: str) -> str:
        for _ in range(self.MAX_TYPEDEF_DEPTH):
            typedef = self.abi.find_type(type_name)
            if typedef is None:
                return type_name
            type_name = f"{typedef.type}[]" if typedef.is_list else typedef.type
        raise SerializationError(f"Typedef cycle while resolving {type_name!r}")

    def action_type(self, action_name: str) -> str:
        action = self.abi.get_action(action_name)
        if action is None:
            raise SerializationError(f"Action {action_name} not found in ABI")
        return action.type

    def encode(self, type_name: str, value: Any) -> bytes:
        return self._serialize(type_name, value)

    def encode_action_data(self, action_name: str, data: Any) -> bytes:
        return self.encode(self.action_type(action_name), data)

    def _serialize(self, type_name: str, value: Any) -> bytes:
        if type_name.endswith("$"):
            return self._serialize(type_name[:-1], value)
        if type_name.endswith("?"):
            if value is None:
                return b"\x00"
            return b"\x01" + self._serialize(type_name[:-1], value)
        if type_name.endswith("[]"):
            if not isinstance(value, (list, tuple)):
                raise SerializationError(f"Expected list for {type_name}, got {value!r}")
            return ListSerializer().serialize([self._serialize(type_name[:-2], item) for item in value])

        resolved = self.resolve(type_name)
        if resolved != type_name:
            return self._serialize(resolved, value)
        if resolved in BUILTIN_SERIALIZERS:
            return self._serialize_builtin(resolved, value)
        if self.abi.find_struct(resolved) is not None:
            return self._serialize_struct(resolved, value)
        if self.abi.find_variant(resolved) is not None:
            return self._serialize_variant(resolved, value)
        raise SerializationError(f"Unknown ABI type: {type_name}")

    @staticmethod
    def _serialize_builtin(type_name: str, value: Any) -> bytes:
        try:
            return BUILTIN_SERIALIZERS[type_name](value)
        except SerializationError:
            raise
        except (ValueError, TypeError, OverflowError, struct.error, AntelopySerializationError) as exc:
            raise SerializationError(f"Cannot encode {value!r} as {type_name}: {exc}") from exc

    def _serialize_struct(self, struct_name: str, value: Any) -> bytes:
        if not isinstance(value, dict):
            raise SerializationError(f"Expected object for {struct_name}, got {value!r}")
        definition = self.abi.find_struct(struct_name)
        encoded = self._serialize(definition.base, value) if definition.base else b""

        for field in definition.fields:
            field_type = _field_type(field)
            if field.name not in value:
                if field_type.endswith("$"):
                    break
                raise SerializationError(f"Missing field {struct_name}.{field.name}")
            try:
                encoded += self._serialize(field_type, value[field.name])
            except SerializationError as exc:
                raise SerializationError(f"{struct_name}.{field.name}: {exc}") from exc
        return encoded

    def _serialize_variant(self, variant_name: str, value: Any) -> bytes:
        options = self.abi.find_variant(variant_name).types
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise SerializationError(f"Variant {variant_name} expects [type, value], got {value!r}")
        type_name, inner = value
        if type_name not in options:
            raise SerializationError(f"{type_name} is not a member of variant {variant_name}")
        return VaruintSerializer().serialize(options.index(type_name)) + self._serialize(type_name, inner)