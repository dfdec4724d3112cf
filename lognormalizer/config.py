"""Configuration models and loaders for lognormalizer.

This module defines the normalizer and logging settings and how values are
loaded from YAML plus environment variable overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .dates import DEFAULT_DATE_FORMAT

DEFAULT_CONFIG_PATH = "lognormalizer.yaml"
DEFAULT_MAX_OBJECT_DEPTH = 2
DEFAULT_MAX_ARRAY_ITEMS = 20


class LoggingConfig(BaseModel):
    """Logging-related configuration."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = "INFO"
    json_logs: bool = Field(default=False, alias="json")


class NormalizerConfig(BaseModel):
    """Bounds and date pattern used by one normalizer instance."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_object_depth: int = Field(default=DEFAULT_MAX_OBJECT_DEPTH, ge=0)
    max_array_items: int = Field(default=DEFAULT_MAX_ARRAY_ITEMS, ge=1)
    date_format: str = DEFAULT_DATE_FORMAT

    @field_validator("date_format", mode="before")
    @classmethod
    def _empty_date_format_to_default(cls, value: Any) -> Any:
        """Treat a missing or empty date pattern as the default pattern."""
        if value is None or value == "":
            return DEFAULT_DATE_FORMAT
        return value


class LogNormalizerConfig(BaseModel):
    """Top-level lognormalizer configuration."""

    model_config = ConfigDict(extra="forbid")

    normalizer: NormalizerConfig | None = None
    logging: LoggingConfig | None = None

    @model_validator(mode="after")
    def _fill_defaults(self) -> "LogNormalizerConfig":
        """Fill omitted sections with their defaults."""
        if self.normalizer is None:
            self.normalizer = NormalizerConfig()
        if self.logging is None:
            self.logging = LoggingConfig()
        return self

    @field_validator("normalizer", "logging", mode="before")
    @classmethod
    def _none_to_empty_section(cls, value: Any) -> Any:
        """Treat explicit YAML `null` for a section as an empty section."""
        if value is None:
            return {}
        return value


def _load_yaml(path: str | None) -> dict[str, Any]:
    """Load a YAML file into a dictionary.

    Missing files are treated as empty config for environment-only deployments.
    """
    if not path:
        return {}
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be object: {path}")
    return data


def _override_from_env(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides on top of file configuration."""
    env_map = {
        "normalizer.max_object_depth": "LOGNORMALIZER_MAX_OBJECT_DEPTH",
        "normalizer.max_array_items": "LOGNORMALIZER_MAX_ARRAY_ITEMS",
        "normalizer.date_format": "LOGNORMALIZER_DATE_FORMAT",
        "logging.level": "LOGNORMALIZER_LOG_LEVEL",
        "logging.json_logs": "LOGNORMALIZER_LOG_JSON",
    }

    out = dict(data)
    out["normalizer"] = dict(out.get("normalizer") or {})
    out["logging"] = dict(out.get("logging") or {})

    for key, env_name in env_map.items():
        value = os.getenv(env_name)
        if value is None:
            continue

        section, name = key.split(".", 1)
        if key in {"normalizer.max_object_depth", "normalizer.max_array_items"}:
            out[section][name] = int(value)
        elif key == "logging.json_logs":
            out[section]["json"] = value.lower() in {"1", "true", "yes", "on"}
        else:
            out[section][name] = value

    return out


def load_config(path: str | None = None) -> LogNormalizerConfig:
    """Load, merge, and validate lognormalizer configuration."""
    final_path = path or os.getenv("LOGNORMALIZER_CONFIG") or DEFAULT_CONFIG_PATH
    raw = _load_yaml(final_path)
    raw = _override_from_env(raw)
    return LogNormalizerConfig.model_validate(raw)
