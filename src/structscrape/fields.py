"""Field introspection for destination record types (pydantic models and dataclasses)."""

from __future__ import annotations

import dataclasses
import datetime as dt
from collections import abc
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from types import UnionType
from typing import Annotated, Any, Dict, Literal, Tuple, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, Field

from .errors import UnsupportedFieldKindError
from .tags import Directive, ExtractMode

DEFAULT_TAG_KEY = "csss"

SCALAR_TYPES = (str, int, float, Decimal, dt.date, dt.time, Enum)
SEQUENCE_ORIGINS = (list, tuple, set, frozenset, abc.Sequence, abc.MutableSequence, abc.Set, abc.MutableSet)


class FieldKind(str, Enum):
    SCALAR = "scalar"
    RECORD = "record"
    SCALAR_SEQUENCE = "scalar_sequence"
    RECORD_SEQUENCE = "record_sequence"


@dataclasses.dataclass(frozen=True)
class TaggedField:
    name: str
    annotation: Any
    tag: str


@dataclasses.dataclass(frozen=True)
class FieldDescriptor:
    name: str
    kind: FieldKind
    directive: Directive
    # scalar type, nested record type, or sequence element type
    target: Any


def css(tag: str, *, key: str = DEFAULT_TAG_KEY, **kwargs: Any) -> Any:
    """Declare a pydantic field extracted by ``tag``; extra kwargs go to ``pydantic.Field``."""
    extra: Dict[str, Any] = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[key] = tag
    return Field(json_schema_extra=extra, **kwargs)


def css_field(tag: str, *, key: str = DEFAULT_TAG_KEY, **kwargs: Any) -> Any:
    """Dataclass counterpart of :func:`css`."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[key] = tag
    return dataclasses.field(metadata=metadata, **kwargs)


def is_record(tp: Any) -> bool:
    if not isinstance(tp, type) or get_origin(tp) is not None:
        return False
    return issubclass(tp, BaseModel) or dataclasses.is_dataclass(tp)


def record_type(dest: Any) -> type:
    """The record type behind ``dest``, which may be the type itself or an instance of it."""
    tp = dest if isinstance(dest, type) else type(dest)
    if not is_record(tp):
        raise UnsupportedFieldKindError("<destination>", tp, "a destination that is not a pydantic model or dataclass")
    return tp


@lru_cache(maxsize=256)
def tagged_fields(tp: type, tag_key: str = DEFAULT_TAG_KEY) -> Tuple[TaggedField, ...]:
    """Fields of ``tp`` that carry a tag under ``tag_key``, in declaration order."""
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return tuple(_model_fields(tp, tag_key))
    if dataclasses.is_dataclass(tp):
        return tuple(_dataclass_fields(tp, tag_key))
    raise UnsupportedFieldKindError("<destination>", tp, "a destination that is not a pydantic model or dataclass")


def _model_fields(tp: type, tag_key: str):
    for name, info in tp.model_fields.items():
        extra = info.json_schema_extra
        if not isinstance(extra, dict) or tag_key not in extra:
            continue
        yield TaggedField(name, info.annotation, str(extra[tag_key]))


def _dataclass_fields(tp: type, tag_key: str):
    try:
        hints = get_type_hints(tp, include_extras=True)
    except NameError as exc:
        raise UnsupportedFieldKindError(tp.__qualname__, tp, f"unresolvable annotations ({exc})") from exc
    for f in dataclasses.fields(tp):
        if tag_key not in f.metadata:
            continue
        yield TaggedField(f.name, hints.get(f.name, f.type), str(f.metadata[tag_key]))


def unwrap_optional(tp: Any) -> Any:
    """Strip ``Annotated`` and ``Optional`` wrappers; other unions are left alone."""
    while True:
        origin = get_origin(tp)
        if origin is Annotated:
            tp = get_args(tp)[0]
            continue
        if origin is Union or origin is UnionType:
            members = [arg for arg in get_args(tp) if arg is not type(None)]
            if len(members) == 1:
                tp = members[0]
                continue
        return tp


def is_scalar(tp: Any) -> bool:
    if tp is Any or get_origin(tp) is Literal:
        return True
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, SCALAR_TYPES)


def sequence_element(tp: Any) -> Tuple[bool, Any]:
    """``(True, element_type)`` when ``tp`` is a homogeneous sequence type."""
    if tp in (list, tuple, set, frozenset):
        return True, Any
    origin = get_origin(tp)
    if origin not in SEQUENCE_ORIGINS:
        return False, None
    args = get_args(tp)
    if not args:
        return True, Any
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:
            return True, args[0]
        # fixed-length tuples are records in disguise
        return False, None
    return True, args[0]


def describe_field(tagged: TaggedField, directive: Directive) -> FieldDescriptor:
    """Classify a tagged field's type shape against its parsed directive."""
    name, annotation = tagged.name, tagged.annotation
    tp = unwrap_optional(annotation)
    if is_record(tp):
        return FieldDescriptor(name, FieldKind.RECORD, directive, tp)
    is_sequence, element = sequence_element(tp)
    if is_sequence:
        element = unwrap_optional(element)
        if is_record(element):
            return FieldDescriptor(name, FieldKind.RECORD_SEQUENCE, directive, element)
        if not is_scalar(element):
            raise UnsupportedFieldKindError(name, element, "an unsupported sequence element kind")
        if directive.mode is ExtractMode.OBJ:
            raise UnsupportedFieldKindError(name, annotation, "object mode on a sequence of scalars")
        return FieldDescriptor(name, FieldKind.SCALAR_SEQUENCE, directive, element)
    if is_scalar(tp):
        if directive.mode is ExtractMode.OBJ:
            raise UnsupportedFieldKindError(name, annotation, "object mode on a scalar field")
        return FieldDescriptor(name, FieldKind.SCALAR, directive, tp)
    raise UnsupportedFieldKindError(name, annotation)


__all__ = [
    "DEFAULT_TAG_KEY",
    "FieldKind",
    "TaggedField",
    "FieldDescriptor",
    "css",
    "css_field",
    "is_record",
    "record_type",
    "tagged_fields",
    "unwrap_optional",
    "is_scalar",
    "sequence_element",
    "describe_field",
]
