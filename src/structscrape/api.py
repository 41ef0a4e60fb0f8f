"""Entry points: parse an HTML document and extract a record from it."""

from __future__ import annotations

import logging
from typing import IO, Any, Dict, Optional, Union

from bs4 import BeautifulSoup, FeatureNotFound
from bs4.builder import ParserRejectedMarkup

from .config import ExtractionSettings, default_settings
from .engine import extract_by_tags, map_from_tags
from .errors import DocumentParseError
from .selection import Selection

logger = logging.getLogger(__name__)

Document = Union[str, bytes]


def parse_document(source: Document, settings: Optional[ExtractionSettings] = None) -> Selection:
    """Parse ``source`` into a root selection that can back several extractions."""
    settings = settings or default_settings()
    if not isinstance(source, (str, bytes)):
        raise DocumentParseError(f"Expected str or bytes document, got {type(source).__name__}")
    if isinstance(source, bytes) and settings.encoding:
        # the lxml builder ignores from_encoding
        try:
            source = source.decode(settings.encoding)
        except (LookupError, UnicodeDecodeError) as exc:
            raise DocumentParseError(f"Cannot decode document as {settings.encoding!r}: {exc}") from exc
    try:
        soup = BeautifulSoup(source, settings.parser)
    except FeatureNotFound as exc:
        raise DocumentParseError(f"Unknown HTML tree builder {settings.parser!r}") from exc
    except ParserRejectedMarkup as exc:
        logger.warning("Parser %s rejected document: %s", settings.parser, exc)
        raise DocumentParseError(f"Cannot parse document: {exc}") from exc
    return Selection.from_node(soup)


def extract_html_reader(reader: IO[Any], dest: Any, settings: Optional[ExtractionSettings] = None) -> Any:
    """Read a whole HTML document from ``reader`` and extract ``dest`` from it."""
    try:
        data = reader.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"Cannot read document: {exc}") from exc
    return extract_by_tags(parse_document(data, settings), dest, settings)


def extract_html_string(document: Document, dest: Any, settings: Optional[ExtractionSettings] = None) -> Any:
    return extract_by_tags(parse_document(document, settings), dest, settings)


def map_html_string(document: Document, template: Any, settings: Optional[ExtractionSettings] = None) -> Dict[str, Any]:
    """Extract the raw field map described by ``template`` without coercing it."""
    return map_from_tags(parse_document(document, settings), template, settings)


__all__ = ["Document", "parse_document", "extract_html_reader", "extract_html_string", "map_html_string"]
