"""CLI entrypoint with extract/parse-tag commands."""

from __future__ import annotations

import argparse
import importlib
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import BaseModel

from .api import extract_html_string, map_html_string
from .coercion import to_mapping
from .config import Config, load_config
from .errors import ExtractionError, MalformedTagError
from .fields import record_type
from .tags import parse_directive

logger = logging.getLogger(__name__)


def load_model(reference: str) -> type:
    """Import a destination record given as ``package.module:ClassName``."""
    module_name, _, attr = reference.partition(":")
    if not module_name or not attr:
        raise argparse.ArgumentTypeError(f"expected module:ClassName, got {reference!r}")
    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise argparse.ArgumentTypeError(f"cannot import {module_name!r}: {exc}") from exc
    for part in attr.split("."):
        if not hasattr(target, part):
            raise argparse.ArgumentTypeError(f"{module_name!r} has no attribute {attr!r}")
        target = getattr(target, part)
    try:
        return record_type(target)
    except ExtractionError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Extract structured records from HTML using CSS field tags")
    parser.add_argument("--config", default="structscrape.yaml", help="Path to config yaml")
    sub = parser.add_subparsers(dest="command", required=True)

    extract_p = sub.add_parser("extract", help="Extract a record from an HTML document")
    extract_p.add_argument("--model", required=True, type=load_model, help="Destination record as module:ClassName")
    extract_p.add_argument("--map", action="store_true", help="Print the raw field map instead of the coerced record")
    extract_p.add_argument("--indent", type=int, default=2)
    extract_p.add_argument("source", nargs="?", default="-", help="HTML file, or - for stdin")

    tag_p = sub.add_parser("parse-tag", help="Show how field tags are parsed")
    tag_p.add_argument("tags", nargs="+")
    return parser


def _read_source(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def _jsonable(record: Any) -> Any:
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json")
    return to_mapping(record)


def _run_extract(config: Config, model: type, source: str, raw_map: bool = False, indent: int = 2) -> int:
    try:
        data = _read_source(source)
    except OSError as exc:
        logger.error("Cannot read %s: %s", source, exc)
        return 1
    if raw_map:
        result = map_html_string(data, model, config.extraction)
    else:
        result = _jsonable(extract_html_string(data, model, config.extraction))
    print(json.dumps(result, indent=indent, ensure_ascii=False, default=str))
    return 0


def _run_parse_tag(tags: List[str]) -> int:
    status = 0
    for tag in tags:
        try:
            directive = parse_directive(tag)
        except MalformedTagError as exc:
            logger.error("%s", exc)
            status = 2
            continue
        print(json.dumps({"tag": tag, **directive.to_dict()}))
    return status


def main(argv: Optional[List[str]] = None) -> int:
    parser = make_parser()
    args = parser.parse_args(argv)
    config = load_config(args.config)
    logging.basicConfig(level=config.logging.level.upper(), format=config.logging.format)
    try:
        if args.command == "extract":
            return _run_extract(config, args.model, args.source, raw_map=args.map, indent=args.indent)
        if args.command == "parse-tag":
            return _run_parse_tag(args.tags)
    except ExtractionError as exc:
        logger.error("Extraction failed: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
