"""JSON text <-> interchange tree.

Decimals are read as ``Decimal`` and written from their own lexical form,
so ``1.50`` keeps its trailing zero through a round trip.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
import json
from typing import Any

from ...domain.errors import DecodeError, EncodeError

ITEM_SEPARATOR = ", "
KEY_SEPARATOR = ": "


def _reject_duplicates(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    node: dict[str, Any] = {}
    for key, value in pairs:
        if key in node:
            raise DecodeError(f"Duplicate property '{key}'", key=key)
        node[key] = value
    return node


def _reject_constant(name: str) -> Any:
    raise DecodeError(f"{name} is not valid JSON")


def _scalar(value: Any) -> str:
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Out of range decimal value: {value}")
        return str(value)
    return json.dumps(value, ensure_ascii=False, allow_nan=False)


def _write(node: Any, indent: int | None, depth: int) -> str:
    if isinstance(node, Mapping):
        for key in node:
            if not isinstance(key, str):
                raise TypeError(f"Property names must be strings, got {key!r}")
        items = [
            f"{_scalar(key)}{KEY_SEPARATOR}{_write(value, indent, depth + 1)}"
            for key, value in node.items()
        ]
        return _container("{", "}", items, indent, depth)
    if isinstance(node, (list, tuple)):
        items = [_write(item, indent, depth + 1) for item in node]
        return _container("[", "]", items, indent, depth)
    return _scalar(node)


def _container(
    opening: str, closing: str, items: list[str], indent: int | None, depth: int
) -> str:
    if not items:
        return opening + closing
    if indent is None:
        return opening + ITEM_SEPARATOR.join(items) + closing
    inner = "\n" + " " * (indent * (depth + 1))
    outer = "\n" + " " * (indent * depth)
    return opening + inner + ("," + inner).join(items) + outer + closing


def dumps(tree: Any, *, indent: int | None = None) -> str:
    """Serialize an interchange tree, keeping mapping key order."""
    try:
        return _write(tree, indent, 0)
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"Cannot serialize to JSON: {exc}") from exc


def loads(text: str | bytes) -> Any:
    try:
        return json.loads(
            text,
            object_pairs_hook=_reject_duplicates,
            parse_float=Decimal,
            parse_constant=_reject_constant,
        )
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}") from exc
