"""Coerce loosely-typed extracted values into destination records via pydantic."""

from __future__ import annotations

import dataclasses
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from .config import ExtractionSettings, default_settings
from .errors import CoercionError
from .fields import FieldDescriptor, FieldKind

NUMERIC_TYPES = (int, float, Decimal)


@lru_cache(maxsize=256)
def _adapter(tp: type) -> TypeAdapter:
    return TypeAdapter(tp)


def to_mapping(record: Any) -> Dict[str, Any]:
    """Turn a coerced record back into a plain ``name -> value`` mapping."""
    if isinstance(record, BaseModel):
        return record.model_dump()
    return dataclasses.asdict(record)


def _is_numeric(tp: Any) -> bool:
    # IntEnum and friends subclass int but have no zero value of their own
    return isinstance(tp, type) and issubclass(tp, NUMERIC_TYPES) and not issubclass(tp, Enum)


def _zero_value(tp: type) -> Any:
    if issubclass(tp, bool):
        return False
    return tp(0)


def _weaken(value: Any, target: Any) -> Any:
    if not isinstance(value, str) or not _is_numeric(target):
        return value
    stripped = value.strip()
    if not stripped:
        return _zero_value(target)
    return stripped


def weak_values(values: Mapping[str, Any], descriptors: Mapping[str, FieldDescriptor]) -> Dict[str, Any]:
    """Loosen scalar strings the way a weak decoder would: trim numbers, empty means zero."""
    weakened: Dict[str, Any] = {}
    for name, value in values.items():
        descriptor = descriptors.get(name)
        if descriptor is None:
            weakened[name] = value
        elif descriptor.kind is FieldKind.SCALAR:
            weakened[name] = _weaken(value, descriptor.target)
        elif descriptor.kind is FieldKind.SCALAR_SEQUENCE:
            weakened[name] = [_weaken(item, descriptor.target) for item in value]
        else:
            weakened[name] = value
    return weakened


def coerce_values(
    target: type,
    values: Mapping[str, Any],
    descriptors: Optional[Mapping[str, FieldDescriptor]] = None,
    settings: Optional[ExtractionSettings] = None,
    instance: Any = None,
) -> Any:
    """Validate ``values`` into a new ``target`` or, when given, update ``instance`` in place."""
    settings = settings or default_settings()
    payload = dict(values)
    if settings.weak_decode and descriptors:
        payload = weak_values(payload, descriptors)
    if instance is not None:
        payload = {**to_mapping(instance), **payload}
    try:
        record = _adapter(target).validate_python(payload)
    except ValidationError as exc:
        raise CoercionError(target, str(exc), exc.errors(include_url=False)) from exc
    if instance is None:
        return record
    try:
        for name in values:
            setattr(instance, name, getattr(record, name))
    except (ValidationError, dataclasses.FrozenInstanceError) as exc:
        raise CoercionError(target, f"cannot assign to frozen record: {exc}") from exc
    return instance


__all__ = ["to_mapping", "weak_values", "coerce_values"]
