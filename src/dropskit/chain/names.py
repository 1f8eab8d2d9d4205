"""
Antelope account / action names.

A name is up to 13 characters packed into a uint64: the first 12 characters
use 5 bits each, the 13th only 4 bits (so it is limited to ``.1-5a-j``).
Packing is done by antelopy; this module adds the validation it skips.
"""

from __future__ import annotations

import re

from antelopy.serializers.names import deserialize_name, serialize_name

NAME_PATTERN = re.compile(r"[.1-5a-z]{0,12}[.1-5a-j]?")


def is_valid_name(value: str) -> bool:
    return bool(NAME_PATTERN.fullmatch(value))


def name_to_int(value: str) -> int:
    """Encode a name string to its uint64 value.

    Raises:
        ValueError: If the string is not a valid Antelope name
    """
    if not is_valid_name(value):
        raise ValueError(f"Invalid name: {value!r}")
    return int.from_bytes(serialize_name(value), "little")


def int_to_name(value: int) -> str:
    """Decode a uint64 back into its name string."""
    if not 0 <= value < 1 << 64:
        raise ValueError(f"Name value out of range: {value}")
    return deserialize_name(value.to_bytes(8, "little"))
