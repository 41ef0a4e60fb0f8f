"""Tag grammar: ``<css selector>;<text|html|attr=name|obj>``."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .errors import MalformedTagError

TAG_SEPARATOR = ";"


class ExtractMode(str, Enum):
    TEXT = "text"
    HTML = "html"
    ATTR = "attr"
    OBJ = "obj"


@dataclass(frozen=True)
class Directive:
    selector: str
    mode: ExtractMode
    attr_name: Optional[str] = None

    def __post_init__(self) -> None:
        if self.mode is ExtractMode.ATTR and not self.attr_name:
            raise MalformedTagError(str(self), "Attribute mode requires an attribute name")
        if self.mode is not ExtractMode.ATTR and self.attr_name is not None:
            raise MalformedTagError(str(self), "Only attribute mode takes an attribute name")

    def __str__(self) -> str:
        if self.mode is ExtractMode.ATTR:
            return f"{self.selector}{TAG_SEPARATOR}attr={self.attr_name or ''}"
        return f"{self.selector}{TAG_SEPARATOR}{self.mode.value}"

    def to_dict(self) -> dict:
        return {"selector": self.selector, "mode": self.mode.value, "attr_name": self.attr_name}


def parse_directive(raw: str) -> Directive:
    """Parse one field tag into a Directive, raising MalformedTagError on bad grammar."""
    bits = raw.strip().split(TAG_SEPARATOR)
    if len(bits) != 2:
        raise MalformedTagError(raw, "Failed to split tag")
    selector, value_type = bits
    if value_type.startswith("obj"):
        return Directive(selector, ExtractMode.OBJ)
    if value_type.startswith("attr"):
        if "=" not in value_type:
            raise MalformedTagError(raw, "Failed to split attribute in tag")
        attr_name = value_type.strip().split("=", 1)[1]
        if not attr_name:
            raise MalformedTagError(raw, "Empty attribute name in tag")
        return Directive(selector, ExtractMode.ATTR, attr_name)
    if value_type not in (ExtractMode.TEXT.value, ExtractMode.HTML.value):
        raise MalformedTagError(raw, "Invalid value type, must be one of attr/text/html/obj")
    return Directive(selector, ExtractMode(value_type))


__all__ = ["TAG_SEPARATOR", "ExtractMode", "Directive", "parse_directive"]
