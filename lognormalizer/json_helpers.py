"""JSON/text helpers for normalized logging output."""

from __future__ import annotations

import datetime
import json
from typing import Any

from .fields import extract_fields, has_fields

_CLEANUP_REPLACEMENTS = (
    ("\\u0000", ""),
    ("\\\\", "\\"),
)


class EncodeError(ValueError):
    """Raised when a normalized tree cannot be represented as JSON text."""


def encode_leftover(value: Any) -> Any:
    """Best-effort JSON form for raw values left behind the object depth cutoff."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    if not isinstance(value, type) and has_fields(value):
        return extract_fields(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def cleanup_json(text: str) -> str:
    """Drop escaped null bytes and collapse doubled backslashes."""
    for old, new in _CLEANUP_REPLACEMENTS:
        text = text.replace(old, new)
    return text


def encode_tree(tree: Any) -> str:
    """Serialize a normalized tree into cleaned-up JSON text.

    Non-ASCII text and forward slashes stay unescaped. NaN and infinities
    that were never normalized, undecodable bytes, and values without a JSON
    form raise :class:`EncodeError`.
    """
    try:
        raw = json.dumps(tree, ensure_ascii=False, allow_nan=False, default=encode_leftover)
    except (TypeError, ValueError, RecursionError) as exc:
        raise EncodeError(str(exc)) from exc
    return cleanup_json(raw)
