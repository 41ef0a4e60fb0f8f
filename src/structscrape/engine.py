"""Tag-driven extraction engine.

For every tagged field of a destination record the engine narrows the current
selection with the field's selector, pulls a value according to the extraction mode,
and recurses for nested records. Values are gathered loosely typed (strings, lists,
plain dicts) and only coerced into the destination once the whole record is built.

Failure policy: a failing field aborts the record it belongs to, while a failing
element inside a sequence field is dropped and the rest of the sequence is kept.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .coercion import coerce_values, to_mapping
from .config import ExtractionSettings, default_settings
from .errors import (
    AttributeNotFoundError,
    ExtractionError,
    MalformedTagError,
    NestedExtractionError,
)
from .fields import FieldDescriptor, FieldKind, describe_field, record_type, tagged_fields
from .selection import Selection
from .tags import Directive, ExtractMode, parse_directive

logger = logging.getLogger(__name__)


def resolve(selection: Selection, selector: str) -> Selection:
    """Narrow ``selection`` by ``selector``; an empty selector keeps the current nodes."""
    if not selector:
        return selection
    return selection.find(selector)


def extract_value(selection: Selection, directive: Directive, settings: ExtractionSettings) -> str:
    mode = directive.mode
    if mode is ExtractMode.TEXT:
        text = selection.text()
        return text.strip() if settings.strip_text else text
    if mode is ExtractMode.HTML:
        return selection.html()
    if mode is ExtractMode.ATTR:
        value, present = selection.attr(directive.attr_name or "")
        if not present:
            raise AttributeNotFoundError(directive.attr_name or "", selection.preview())
        return value or ""
    raise MalformedTagError(str(directive), "Object mode yields no scalar value")


def _collect_each(selection: Selection, descriptor: FieldDescriptor, extract: Callable[[Selection], Any]) -> List[Any]:
    collected: List[Any] = []
    for index, element in enumerate(selection.each()):
        try:
            collected.append(extract(element))
        except ExtractionError as exc:
            logger.debug("Skipping element %d of field %s: %s", index, descriptor.name, exc)
    return collected


def dispatch_field(selection: Selection, descriptor: FieldDescriptor, settings: ExtractionSettings) -> Any:
    """Produce the loosely-typed value of one field."""
    directive = descriptor.directive
    sel = resolve(selection, directive.selector)
    logger.debug(
        "Field %s: kind=%s tag=%r matched %d node(s)", descriptor.name, descriptor.kind.value, str(directive), len(sel)
    )
    kind = descriptor.kind
    if kind is FieldKind.SCALAR:
        return extract_value(sel, directive, settings)
    if kind is FieldKind.RECORD:
        try:
            return to_mapping(extract_by_tags(sel, descriptor.target, settings))
        except ExtractionError as exc:
            raise NestedExtractionError(descriptor.name, exc) from exc
    if kind is FieldKind.SCALAR_SEQUENCE:
        return _collect_each(sel, descriptor, lambda el: extract_value(el, directive, settings))
    return _collect_each(sel, descriptor, lambda el: to_mapping(extract_by_tags(el, descriptor.target, settings)))


class TagExtractor:
    """Collects the intermediate value map of one record type against one selection."""

    def __init__(self, target: type, settings: Optional[ExtractionSettings] = None):
        self.target = target
        self.settings = settings or default_settings()
        self.values: Dict[str, Any] = {}
        self.descriptors: Dict[str, FieldDescriptor] = {}

    def collect(self, selection: Selection) -> Dict[str, Any]:
        for tagged in tagged_fields(self.target, self.settings.tag_key):
            descriptor = describe_field(tagged, parse_directive(tagged.tag))
            self.descriptors[descriptor.name] = descriptor
            self.values[descriptor.name] = dispatch_field(selection, descriptor, self.settings)
        return self.values

    def coerce(self, instance: Any = None) -> Any:
        return coerce_values(self.target, self.values, self.descriptors, self.settings, instance)


def extract_by_tags(selection: Selection, dest: Any, settings: Optional[ExtractionSettings] = None) -> Any:
    """Fill ``dest`` from ``selection`` according to its field tags.

    ``dest`` may be a record type, in which case a new instance is returned, or an
    existing record, which is updated in place and returned.
    """
    extractor = TagExtractor(record_type(dest), settings)
    extractor.collect(selection)
    return extractor.coerce(None if isinstance(dest, type) else dest)


def map_from_tags(selection: Selection, template: Any, settings: Optional[ExtractionSettings] = None) -> Dict[str, Any]:
    """Like :func:`extract_by_tags` but return the raw field map without coercion."""
    extractor = TagExtractor(record_type(template), settings)
    return extractor.collect(selection)


__all__ = ["resolve", "extract_value", "dispatch_field", "TagExtractor", "extract_by_tags", "map_from_tags"]
