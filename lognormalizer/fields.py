"""Field extraction for generic objects.

Types control their rendering by implementing the describable-fields
capability, a ``__log_fields__`` method returning an ordered mapping of
field names to values. pydantic models are treated as describable through
their declared fields. Every other object goes through best-effort
reflection, which is lossy by nature: dataclass fields, then the instance
``__dict__`` and any populated ``__slots__``.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel

LOG_FIELDS_METHOD = "__log_fields__"


@runtime_checkable
class DescribableFields(Protocol):
    """Capability for objects that describe their own loggable fields."""

    def __log_fields__(self) -> Mapping[str, Any]:
        ...


def is_describable(value: Any) -> bool:
    """Return true when ``value`` opts in to custom field rendering."""
    if isinstance(value, type):
        return False
    if isinstance(value, BaseModel):
        return True
    return callable(getattr(type(value), LOG_FIELDS_METHOD, None))


def _slot_names(cls: type) -> list[str]:
    names: list[str] = []
    for klass in reversed(cls.__mro__):
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__") or name in names:
                continue
            names.append(name)
    return names


def _reflect(value: Any) -> dict[str, Any]:
    if dataclasses.is_dataclass(value):
        return {field.name: getattr(value, field.name) for field in dataclasses.fields(value)}

    out: dict[str, Any] = {}
    instance_dict = getattr(value, "__dict__", None)
    if isinstance(instance_dict, Mapping):
        out.update((str(key), item) for key, item in instance_dict.items())
    for name in _slot_names(type(value)):
        if name in out:
            continue
        # Unset slots raise AttributeError and are simply absent.
        try:
            out[name] = getattr(value, name)
        except AttributeError:
            continue
    return out


def has_fields(value: Any) -> bool:
    """Return true when reflection can see any field storage on ``value``."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return True
    if isinstance(getattr(value, "__dict__", None), Mapping):
        return True
    return bool(_slot_names(type(value)))


def extract_fields(value: Any) -> dict[str, Any]:
    """Return an ordered, string-keyed mapping of the fields of ``value``."""
    if isinstance(value, BaseModel):
        return {name: getattr(value, name) for name in type(value).model_fields}
    method = getattr(type(value), LOG_FIELDS_METHOD, None)
    if callable(method):
        return {str(key): item for key, item in dict(method(value)).items()}
    return _reflect(value)
