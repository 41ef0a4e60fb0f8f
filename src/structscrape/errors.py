"""Exception hierarchy for tag-driven extraction."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, get_origin


class ExtractionError(Exception):
    """Base class for every error raised by structscrape."""


class MalformedTagError(ExtractionError, ValueError):
    def __init__(self, tag: str, reason: str):
        self.tag = tag
        super().__init__(f"{reason}: {tag!r}")


class SelectionFindError(ExtractionError):
    def __init__(self, selector: str, reason: str):
        self.selector = selector
        super().__init__(f"Invalid selector {selector!r}: {reason}")


class AttributeNotFoundError(ExtractionError):
    def __init__(self, attr_name: str, markup: str = ""):
        self.attr_name = attr_name
        self.markup = markup
        super().__init__(f"Attribute '{attr_name}' not found in selection: {markup}")


class MarkupExtractionError(ExtractionError):
    pass


class UnsupportedFieldKindError(ExtractionError, TypeError):
    def __init__(self, field: str, annotation: Any, reason: str = "unsupported field kind"):
        self.field = field
        self.annotation = annotation
        super().__init__(f"Field '{field}' has {reason}: {_type_name(annotation)}")


class NestedExtractionError(ExtractionError):
    """Failure inside a nested record; ``path`` is the dotted field path to the failing field."""

    def __init__(self, field: str, cause: ExtractionError):
        self.field = field
        self.cause = cause
        if isinstance(cause, NestedExtractionError):
            self.path = f"{field}.{cause.path}"
            self.root_cause: ExtractionError = cause.root_cause
        else:
            self.path = field
            self.root_cause = cause
        super().__init__(f"{self.path}: {self.root_cause}")


class DocumentParseError(ExtractionError):
    pass


class CoercionError(ExtractionError):
    def __init__(self, target: Any, message: str, details: Optional[List[Dict[str, Any]]] = None):
        self.target = target
        self.details = details or []
        super().__init__(f"Cannot coerce extracted values into {_type_name(target)}: {message}")


def _type_name(tp: Any) -> str:
    if get_origin(tp) is None and isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


__all__ = [
    "ExtractionError",
    "MalformedTagError",
    "SelectionFindError",
    "AttributeNotFoundError",
    "MarkupExtractionError",
    "UnsupportedFieldKindError",
    "NestedExtractionError",
    "DocumentParseError",
    "CoercionError",
]
