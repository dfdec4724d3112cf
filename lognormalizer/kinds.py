"""Input kinds understood by the normalizer and the classifier that picks one."""

from __future__ import annotations

import codecs
import datetime
import enum
import io
import mmap
import socket
import sqlite3
import types
from collections.abc import Iterable
from typing import Any

from .fields import has_fields, is_describable


class ValueKind(enum.Enum):
    """Closed set of input kinds, one normalization strategy each."""

    NIL = "nil"
    BOOL = "bool"
    NUMBER = "number"
    TEXT = "text"
    TRAVERSABLE = "traversable"
    TEMPORAL = "temporal"
    ERROR_CHAIN = "error_chain"
    GENERIC_OBJECT = "generic_object"
    HANDLE = "handle"
    UNKNOWN = "unknown"


TEMPORAL_TYPES: tuple[type, ...] = (datetime.date, datetime.time)
HANDLE_TYPES: tuple[type, ...] = (
    io.IOBase,
    socket.socket,
    mmap.mmap,
    codecs.StreamReader,
    codecs.StreamWriter,
    codecs.StreamReaderWriter,
    sqlite3.Cursor,
)
# Wrappers such as tempfile.NamedTemporaryFile expose these without subclassing IOBase.
FILE_LIKE_METHODS = ("fileno", "read")
TEXT_TYPES: tuple[type, ...] = (str, bytes, bytearray)

# Callable and namespace objects carry a __dict__ but are not data.
_NON_DATA_TYPES: tuple[type, ...] = (
    type,
    types.ModuleType,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.MethodWrapperType,
    types.WrapperDescriptorType,
    types.CodeType,
    types.FrameType,
    types.TracebackType,
)


def _has_method(value: Any, name: str) -> bool:
    try:
        return callable(getattr(value, name, None))
    except Exception:
        return False


def is_handle(value: Any) -> bool:
    """Return true for opaque runtime handles (files, sockets, memory maps, cursors).

    Objects that are not IO subclasses count as handles when they behave like
    files, i.e. expose both ``fileno()`` and ``read()``.
    """
    if isinstance(value, HANDLE_TYPES):
        return True
    if isinstance(value, type):
        return False
    return all(_has_method(value, name) for name in FILE_LIKE_METHODS)


def is_traversable(value: Any) -> bool:
    """Return true for containers and iterables rendered element by element."""
    if isinstance(value, TEXT_TYPES) or is_handle(value):
        return False
    return isinstance(value, Iterable)


def classify(value: Any) -> ValueKind:
    """Map a value onto its :class:`ValueKind`.

    Precedence follows the strategy order: scalars, traversable, temporal,
    object (exceptions first), handle. Types that opt in to
    ``__log_fields__`` are objects even when they are also iterable.
    """
    if value is None:
        return ValueKind.NIL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, TEXT_TYPES):
        return ValueKind.TEXT
    if is_describable(value):
        return ValueKind.GENERIC_OBJECT
    if is_traversable(value):
        return ValueKind.TRAVERSABLE
    if isinstance(value, TEMPORAL_TYPES):
        return ValueKind.TEMPORAL
    if isinstance(value, BaseException):
        return ValueKind.ERROR_CHAIN
    if not is_handle(value) and not isinstance(value, _NON_DATA_TYPES) and has_fields(value):
        return ValueKind.GENERIC_OBJECT
    if is_handle(value):
        return ValueKind.HANDLE
    return ValueKind.UNKNOWN
