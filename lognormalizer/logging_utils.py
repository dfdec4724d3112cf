"""Logging setup helpers for lognormalizer."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

from .config import LoggingConfig
from .json_helpers import encode_leftover
from .normalizer import Normalizer

# Attributes every LogRecord carries; anything else arrived through `extra=`.
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime", "taskName"}


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the custom attributes attached to a log record."""
    return {key: value for key, value in vars(record).items() if key not in _STANDARD_RECORD_ATTRS}


class JsonLogFormatter(logging.Formatter):
    """Format log records as JSON lines with normalized context values."""

    def __init__(self, normalizer: Normalizer | None = None) -> None:
        super().__init__()
        self._normalizer = normalizer or Normalizer()

    def format(self, record: logging.LogRecord) -> str:
        """Render one log record as JSON."""
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            payload["context"] = self._normalizer.normalize(context)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        try:
            return json.dumps(payload, ensure_ascii=False, allow_nan=False, default=encode_leftover)
        except (TypeError, ValueError, RecursionError) as exc:
            # Context that cannot be encoded is dropped rather than losing the record.
            payload.pop("context", None)
            payload["context_error"] = str(exc)
            return json.dumps(payload, ensure_ascii=False)


def setup_logging(cfg: LoggingConfig, normalizer: Normalizer | None = None) -> None:
    """Configure the root logger from runtime configuration."""
    level = getattr(logging, cfg.level.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)

    handler = logging.StreamHandler()
    if cfg.json_logs:
        handler.setFormatter(JsonLogFormatter(normalizer))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    root.handlers.clear()
    root.addHandler(handler)
