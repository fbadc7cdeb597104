"""JSON wire codec shared by the client and the server.

Every structured value that crosses the bridge goes through ``encode``/``decode``.
Output is compact and pure ASCII: non-ASCII code points and DEL are ``\\uXXXX``-escaped.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import date, time, timedelta
from enum import Enum
from typing import Any

LEAF_TYPES = (str, bytes, bytearray, int, float, bool, type(None), date, time, timedelta, Enum)


def is_leaf(value: Any) -> bool:
    """True for values the codec serializes directly, without attribute reflection."""
    return isinstance(value, LEAF_TYPES)


def _declared_slots(cls: type) -> tuple[str, ...]:
    slots = cls.__dict__.get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(slots)


def has_attribute_state(value: Any) -> bool:
    """True when ``value`` is a structured object whose public attributes can be enumerated."""
    if is_leaf(value) or isinstance(value, (Mapping, list, tuple, set, frozenset, type)):
        return False
    if hasattr(value, "__dict__"):
        return True
    return any(_declared_slots(cls) for cls in type(value).__mro__ if cls is not object)


def public_attributes(obj: Any) -> dict[str, Any]:
    """Return a new mapping of the object's public (non-underscore) attribute state."""
    state: dict[str, Any] = {}
    for cls in reversed(type(obj).__mro__):
        for name in _declared_slots(cls):
            if name.startswith("_") or name in state:
                continue
            if hasattr(obj, name):
                state[name] = getattr(obj, name)
    if hasattr(obj, "__dict__"):
        for name, value in vars(obj).items():
            if not name.startswith("_"):
                state[name] = value
    return state


def _default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, (set, frozenset)):
        return list(value)
    if has_attribute_state(value):
        return public_attributes(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode(value: Any) -> str:
    """Serialize a native value to compact, ASCII-only JSON text."""
    text = json.dumps(value, ensure_ascii=True, separators=(",", ":"), default=_default)
    return text.replace("\x7f", "\\u007f")


def decode(text: str | bytes) -> Any:
    """Parse JSON text; raises ``ValueError`` (``json.JSONDecodeError``) on malformed input."""
    return json.loads(text)


def force_object(value: Any) -> Any:
    """Rewrite lists and tuples at any depth into index-keyed objects.

    Scalars stay scalars; structured objects are flattened to their public attributes
    first so their nested sequences are rewritten too.
    """
    if isinstance(value, Mapping):
        return {str(key): force_object(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return {str(index): force_object(item) for index, item in enumerate(value)}
    if has_attribute_state(value):
        return force_object(public_attributes(value))
    return value
