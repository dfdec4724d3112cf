"""Rendering of exceptions and their cause chains."""

from __future__ import annotations

import logging
import traceback
from typing import Any

from .utils import class_name

LOG = logging.getLogger(__name__)

UNKNOWN_LOCATION = "<unknown>:0"
UNPRINTABLE_MESSAGE = "<exception str() failed>"


def error_code(exc: BaseException) -> int:
    """Return the integer code carried by an exception, 0 when it has none."""
    for attr in ("code", "errno"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 0


def error_message(exc: BaseException) -> str:
    """Return ``str(exc)``, or a placeholder when the exception cannot render itself."""
    try:
        return str(exc)
    except Exception as str_exc:
        LOG.debug("str() of %s failed: %s", class_name(exc), str_exc)
        return UNPRINTABLE_MESSAGE


def error_location(exc: BaseException) -> str:
    """Return ``path:line`` of the frame that raised ``exc``."""
    frames = traceback.extract_tb(exc.__traceback__) if exc.__traceback__ else []
    if not frames:
        return UNKNOWN_LOCATION
    last = frames[-1]
    return f"{last.filename}:{last.lineno}"


def error_cause(exc: BaseException) -> BaseException | None:
    """Return the exception that led to ``exc``, honouring ``raise ... from None``."""
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def normalize_exception(exc: BaseException, _chain: set[int] | None = None) -> dict[str, Any]:
    """Render ``exc`` and every cause behind it as nested mappings.

    The cause chain is followed to its end; an exception that shows up twice
    in the same chain ends the walk instead of looping.
    """
    chain = set() if _chain is None else _chain
    chain.add(id(exc))

    data: dict[str, Any] = {
        "class": class_name(exc),
        "message": error_message(exc),
        "code": error_code(exc),
        "file": error_location(exc),
    }
    trace = "".join(traceback.format_tb(exc.__traceback__)).rstrip("\n") if exc.__traceback__ else ""
    data["trace"] = [trace]

    previous = error_cause(exc)
    if previous is not None:
        if id(previous) in chain:
            LOG.debug("Exception chain loops back to %s, stopping", class_name(previous))
        else:
            data["previous"] = normalize_exception(previous, chain)
    return data
