"""Typed accessors for parsed TOML tables.

`shipyard.toml` and `Cargo.toml` arrive from tomllib as plain objects. These
helpers validate at the boundary and narrow the types.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TypeGuard, cast

StrDict = dict[str, object]


def is_str_dict(obj: object) -> TypeGuard[StrDict]:
    return isinstance(obj, dict) and all(isinstance(k, str) for k in cast(StrDict, obj))


def as_str_dict(obj: object) -> StrDict | None:
    if is_str_dict(obj):
        return obj
    return None


def get_str(table: Mapping[str, object], key: str) -> str | None:
    """Get a stripped, non-empty string, or None."""
    value = table.get(key)
    if not isinstance(value, str):
        return None
    s = value.strip()
    return s or None


def get_bool(table: Mapping[str, object], key: str) -> bool | None:
    value = table.get(key)
    if isinstance(value, bool):
        return value
    return None


def get_table(table: Mapping[str, object], key: str) -> StrDict | None:
    return as_str_dict(table.get(key))


def get_str_list(table: Mapping[str, object], key: str) -> tuple[str, ...] | None:
    """Get a list of strings as a tuple.

    Returns None if the key is missing or any item is not a string.
    """
    value = table.get(key)
    if not isinstance(value, list):
        return None
    items = tuple(cast(list[object], value))
    if not all(isinstance(item, str) for item in items):
        return None
    return cast(tuple[str, ...], items)
