"""Fill pydantic models and dataclasses from HTML using CSS selector field tags."""

from .api import extract_html_reader, extract_html_string, map_html_string, parse_document
from .config import ExtractionSettings, load_config
from .engine import extract_by_tags, map_from_tags
from .errors import (
    AttributeNotFoundError,
    CoercionError,
    DocumentParseError,
    ExtractionError,
    MalformedTagError,
    MarkupExtractionError,
    NestedExtractionError,
    SelectionFindError,
    UnsupportedFieldKindError,
)
from .fields import css, css_field
from .selection import Selection
from .tags import Directive, ExtractMode, parse_directive

__all__ = [
    "extract_html_reader",
    "extract_html_string",
    "map_html_string",
    "parse_document",
    "extract_by_tags",
    "map_from_tags",
    "css",
    "css_field",
    "Selection",
    "Directive",
    "ExtractMode",
    "parse_directive",
    "ExtractionSettings",
    "load_config",
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

__version__ = "0.1.0"
