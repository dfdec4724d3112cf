"""Shared utility helpers for the lognormalizer package."""

from __future__ import annotations

from typing import Any

HANDLE_TEXT_LIMIT = 40


def class_name(value: Any) -> str:
    """Return the qualified class name of a value.

    Builtins are reported by their bare name, everything else as
    ``module.QualName``.
    """
    cls = value if isinstance(value, type) else type(value)
    module = getattr(cls, "__module__", None)
    if not module or module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def handle_identifier(handle: Any, max_len: int = HANDLE_TEXT_LIMIT) -> str:
    """Describe an opaque handle in at most ``max_len`` characters.

    The helper never raises; a broken ``__repr__`` falls back to the type name.
    """
    try:
        raw = repr(handle)
    except Exception:
        raw = f"<{type(handle).__name__}>"
    return raw[:max_len]
