"""Query handle over BeautifulSoup nodes, modelled on a jQuery-style selection."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from bs4 import Tag
from soupsieve import SelectorSyntaxError

from .errors import MarkupExtractionError, SelectionFindError

PREVIEW_CHARS = 200


class Selection:
    """Zero or more parsed nodes in document order.

    A selection never mutates the tree it points into, so a single parsed document
    can back any number of extractions.
    """

    __slots__ = ("_nodes",)

    def __init__(self, nodes: Iterable[Tag] = ()):
        self._nodes: Tuple[Tag, ...] = tuple(nodes)

    @classmethod
    def from_node(cls, node: Tag) -> "Selection":
        return cls((node,))

    @property
    def nodes(self) -> Sequence[Tag]:
        return self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator["Selection"]:
        return self.each()

    def __repr__(self) -> str:
        names = ", ".join(node.name or "?" for node in self._nodes[:5])
        more = "" if len(self._nodes) <= 5 else ", ..."
        return f"Selection([{names}{more}])"

    def each(self) -> Iterator["Selection"]:
        """Yield a single-node selection per matched node."""
        for node in self._nodes:
            yield Selection.from_node(node)

    def find(self, selector: str) -> "Selection":
        """Descendants of every node matching ``selector``, de-duplicated, in document order."""
        seen = set()
        found: List[Tag] = []
        for node in self._nodes:
            try:
                matches = node.select(selector)
            except SelectorSyntaxError as exc:
                raise SelectionFindError(selector, str(exc)) from exc
            for match in matches:
                if id(match) in seen:
                    continue
                seen.add(id(match))
                found.append(match)
        return Selection(found)

    def text(self) -> str:
        """Combined text content of all nodes."""
        return "".join(node.get_text() for node in self._nodes)

    def html(self) -> str:
        """Inner markup of the first node, or an empty string for an empty selection."""
        if not self._nodes:
            return ""
        try:
            return self._nodes[0].decode_contents()
        except RecursionError as exc:
            raise MarkupExtractionError(f"Cannot render markup of <{self._nodes[0].name}>: {exc}") from exc

    def attr(self, name: str) -> Tuple[Optional[str], bool]:
        """Value of attribute ``name`` on the first node and whether it was present."""
        if not self._nodes:
            return None, False
        value = self._nodes[0].get(name)
        if value is None:
            return None, False
        if isinstance(value, (list, tuple)):
            # bs4 splits multi-valued attributes such as class and rel
            value = " ".join(value)
        return str(value), True

    def preview(self) -> str:
        try:
            markup = self.html()
        except MarkupExtractionError:
            return ""
        if len(markup) > PREVIEW_CHARS:
            return markup[:PREVIEW_CHARS] + "..."
        return markup


__all__ = ["Selection"]
