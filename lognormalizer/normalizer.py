"""Normalization of arbitrary values into JSON-safe trees for log records.

A :class:`Normalizer` turns whatever a logging call site hands it (scalars,
containers, dates, exception chains, plain objects, file and socket handles)
into a tree of ``dict``/``list``/scalar nodes that JSON can carry, and
:meth:`Normalizer.format` turns that tree into the final log text.

Work is bounded in two ways: every container contributes at most
``max_array_items`` entries, and object fields are only normalized down to
``max_object_depth`` nested objects. Beyond that depth an object's fields are
passed through raw.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable

from .config import DEFAULT_MAX_ARRAY_ITEMS, DEFAULT_MAX_OBJECT_DEPTH, NormalizerConfig
from .dates import format_date
from .error_chain import normalize_exception
from .fields import extract_fields
from .json_helpers import EncodeError, encode_tree
from .kinds import ValueKind, classify
from .utils import class_name, handle_identifier

LOG = logging.getLogger(__name__)

TRUNCATION_KEY = "..."
TRUNCATION_TEMPLATE = "Over {limit} items, aborting normalization"
OBJECT_TEMPLATE = "[object] ({name})"
RESOURCE_PREFIX = "[resource] "
UNKNOWN_TEMPLATE = "[unknown({kind})]"
CIRCULAR_TEMPLATE = "[circular reference] ({name})"


@dataclass(frozen=True)
class FormatResult:
    """Outcome of :meth:`Normalizer.format`.

    ``text`` is ``None`` only when encoding failed, in which case ``error``
    holds the reason. A value that normalizes to ``None`` still succeeds with
    the text ``"null"``.
    """

    text: str | None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return true when the value was encoded."""
        return self.error is None

    def unwrap(self) -> str:
        """Return the encoded text or raise :class:`EncodeError`."""
        if self.text is None:
            raise EncodeError(self.error or "value could not be encoded")
        return self.text


def normalize_float(value: float) -> float | str:
    """Replace infinities and NaN with text markers JSON can carry."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "INF" if value > 0 else "-INF"
    return value


class Normalizer:
    """Convert values of unknown type into bounded, JSON-safe trees.

    Settings are fixed at construction, so one instance can be shared freely
    between threads.
    """

    def __init__(
        self,
        max_object_depth: int = DEFAULT_MAX_OBJECT_DEPTH,
        max_array_items: int = DEFAULT_MAX_ARRAY_ITEMS,
        date_format: str | None = None,
    ) -> None:
        self._config = NormalizerConfig(
            max_object_depth=max_object_depth,
            max_array_items=max_array_items,
            date_format=date_format,
        )
        self._strategies: dict[ValueKind, Callable[[Any, int, frozenset[int]], Any]] = {
            ValueKind.NIL: self._normalize_scalar,
            ValueKind.BOOL: self._normalize_scalar,
            ValueKind.NUMBER: self._normalize_scalar,
            ValueKind.TEXT: self._normalize_scalar,
            ValueKind.TRAVERSABLE: self._normalize_traversable,
            ValueKind.TEMPORAL: self._normalize_date,
            ValueKind.ERROR_CHAIN: self._normalize_error,
            ValueKind.GENERIC_OBJECT: self._normalize_object,
            ValueKind.HANDLE: self._normalize_resource,
            ValueKind.UNKNOWN: self._normalize_unknown,
        }

    @classmethod
    def from_config(cls, cfg: NormalizerConfig) -> "Normalizer":
        """Build a normalizer from validated configuration."""
        return cls(
            max_object_depth=cfg.max_object_depth,
            max_array_items=cfg.max_array_items,
            date_format=cfg.date_format,
        )

    @property
    def config(self) -> NormalizerConfig:
        return self._config

    @property
    def max_object_depth(self) -> int:
        return self._config.max_object_depth

    @property
    def max_array_items(self) -> int:
        return self._config.max_array_items

    @property
    def date_format(self) -> str:
        return self._config.date_format

    def format(self, value: Any) -> FormatResult:
        """Normalize ``value`` and encode it as log text.

        Text that normalizes to plain text is returned unchanged; everything
        else becomes JSON with escaped null bytes removed and doubled
        backslashes collapsed.
        """
        tree = self.normalize(value)
        if isinstance(tree, str):
            return FormatResult(text=tree)
        try:
            return FormatResult(text=encode_tree(tree))
        except EncodeError as exc:
            LOG.debug("Could not encode normalized %s: %s", class_name(value), exc)
            return FormatResult(text=None, error=str(exc))

    def normalize(self, value: Any, depth: int = 0) -> Any:
        """Convert ``value`` into a JSON-safe tree.

        ``depth`` counts the object-field descents already made above this
        value and is only advanced by the object strategy.
        """
        return self._normalize(value, depth, frozenset())

    def _normalize(self, value: Any, depth: int, path: frozenset[int]) -> Any:
        kind = classify(value)
        return self._strategies[kind](value, depth, path)

    def _normalize_scalar(self, value: Any, depth: int, path: frozenset[int]) -> Any:
        if isinstance(value, float):
            return normalize_float(value)
        if isinstance(value, (bytes, bytearray)):
            try:
                return bytes(value).decode("utf-8")
            except UnicodeDecodeError:
                # Left raw so that encoding reports the failure.
                return value
        return value

    def _circular(self, value: Any) -> str:
        LOG.debug("Circular reference to %s skipped during normalization", class_name(value))
        return CIRCULAR_TEMPLATE.format(name=class_name(value))

    def _mapping_key(self, key: Any) -> str:
        """Return the JSON object key for a mapping key.

        Keys are converted the way JSON converts them, so ``1`` and ``"1"``
        land on the same entry and the later value wins.
        """
        if isinstance(key, str):
            return key
        if isinstance(key, bool):
            return "true" if key else "false"
        if key is None:
            return "null"
        if isinstance(key, float):
            return str(normalize_float(key))
        try:
            return str(key)
        except Exception:
            return UNKNOWN_TEMPLATE.format(kind=type(key).__name__)

    def _normalize_traversable(self, value: Any, depth: int, path: frozenset[int]) -> Any:
        if id(value) in path:
            return self._circular(value)
        path = path | {id(value)}

        limit = self.max_array_items
        is_mapping = isinstance(value, Mapping)

        normalized: dict[Any, Any] = {}
        truncated = False
        count = 1
        try:
            items = value.items() if is_mapping else enumerate(value)
            for key, item in items:
                if count >= limit:
                    normalized[TRUNCATION_KEY] = TRUNCATION_TEMPLATE.format(limit=limit)
                    truncated = True
                    break
                count += 1
                if is_mapping:
                    key = self._mapping_key(key)
                normalized[key] = self._normalize(item, depth, path)
        except Exception as exc:
            # Entries gathered before the failure are kept.
            LOG.debug("Iteration over %s failed after %d items: %s", class_name(value), count - 1, exc)

        if is_mapping or truncated:
            return normalized
        return list(normalized.values())

    def _normalize_date(self, value: Any, depth: int, path: frozenset[int]) -> str:
        return format_date(value, self.date_format)

    def _normalize_error(self, value: BaseException, depth: int, path: frozenset[int]) -> dict[str, Any]:
        return normalize_exception(value)

    def _normalize_object(self, value: Any, depth: int, path: frozenset[int]) -> Any:
        if isinstance(value, BaseException):
            return self._normalize_error(value, depth, path)
        if id(value) in path:
            return self._circular(value)

        try:
            fields = extract_fields(value)
        except Exception as exc:
            LOG.debug("Field extraction failed for %s: %s", class_name(value), exc)
            fields = {}

        response: Any = fields
        # Past the depth limit the fields are handed on as-is.
        if depth < self.max_object_depth:
            response = self._normalize(fields, depth + 1, path | {id(value)})

        return [OBJECT_TEMPLATE.format(name=class_name(value)), response]

    def _normalize_resource(self, value: Any, depth: int, path: frozenset[int]) -> str:
        return RESOURCE_PREFIX + handle_identifier(value)

    def _normalize_unknown(self, value: Any, depth: int, path: frozenset[int]) -> str:
        return UNKNOWN_TEMPLATE.format(kind=type(value).__name__)
