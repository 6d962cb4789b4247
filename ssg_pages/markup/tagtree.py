"""Offset-preserving tag tree for shell documents.

The splicing helpers never re-serialise a parsed document. Instead they locate
tags in the original text and cut around the recorded offsets, so the tree
built here keeps, for every tag, where it starts, where its opening tag ends,
where the element ends, and the raw source of each attribute (including the
original quoting).

Example
-------
>>> nodes = parse_tags('<div id="app" class=x><p>hi</p></div>')
>>> root = nodes[0]
>>> (root.name, root.start, root.end)
('div', 0, 37)
>>> [attr.raw for attr in root.attributes]
['id="app"', 'class=x']
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import re
from html import unescape
from html.parser import HTMLParser

VOID_ELEMENTS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    }
)

ATTRIBUTE_PATTERN = re.compile(
    r"""
    (?P<name>[^\s"'>/=]+)
    (?:\s*=\s*
        (?P<value>"[^"]*"|'[^']*'|[^\s"'=<>`]+)
    )?
    """,
    re.VERBOSE,
)
_TAG_NAME_PATTERN = re.compile(r"<\s*[^\s/>]+")


@dc.dataclass(slots=True, frozen=True)
class Attribute:
    """A single attribute as it appears in the source document.

    Attributes
    ----------
    name : str
        Lower-cased attribute name.
    value : str | None
        Unescaped value, or ``None`` for valueless (boolean) attributes.
    raw : str
        Exact source text of the attribute, e.g. ``class='x'``.
    start : int
        Offset of the first character of ``raw`` in the document.
    end : int
        Offset one past the last character of ``raw``.
    """

    name: str
    value: str | None
    raw: str
    start: int
    end: int


@dc.dataclass(slots=True)
class TagNode:
    """An element located in the source document by offsets."""

    name: str
    attributes: list[Attribute]
    start: int
    open_end: int
    end: int = -1
    children: list[TagNode] = dc.field(default_factory=list)

    def get(self, name: str) -> str | None:
        """Return the value of the first attribute called ``name``."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.value
        return None

    def has_attribute(self, name: str) -> bool:
        return any(attr.name == name for attr in self.attributes)


def parse_tags(html: str) -> list[TagNode]:
    """Parse ``html`` into a forest of :class:`TagNode` objects."""
    builder = _TreeBuilder(html)
    builder.feed(html)
    builder.close()
    return builder.finish()


def walk(nodes: cabc.Iterable[TagNode]) -> cabc.Iterator[TagNode]:
    """Yield ``nodes`` and their descendants depth-first in document order."""
    for node in nodes:
        yield node
        yield from walk(node.children)


def find_first(
    nodes: cabc.Iterable[TagNode], predicate: cabc.Callable[[TagNode], bool]
) -> TagNode | None:
    """Return the first node in document order satisfying ``predicate``."""
    return next((node for node in walk(nodes) if predicate(node)), None)


def parse_attributes(start_tag: str, offset: int = 0) -> list[Attribute]:
    """Extract attributes from the raw text of an opening tag.

    ``offset`` is the position of ``start_tag`` within the full document so
    that the returned attribute offsets are absolute.
    """
    name_match = _TAG_NAME_PATTERN.match(start_tag)
    position = name_match.end() if name_match else 0
    body_end = len(start_tag) - 1 if start_tag.endswith(">") else len(start_tag)
    attributes: list[Attribute] = []
    for match in ATTRIBUTE_PATTERN.finditer(start_tag, position, body_end):
        raw_value = match.group("value")
        value: str | None = None
        if raw_value is not None:
            if raw_value[:1] in {'"', "'"}:
                raw_value = raw_value[1:-1]
            value = unescape(raw_value)
        attributes.append(
            Attribute(
                name=match.group("name").lower(),
                value=value,
                raw=match.group(0),
                start=offset + match.start(),
                end=offset + match.end(),
            )
        )
    return attributes


class _TreeBuilder(HTMLParser):
    """Translate :class:`HTMLParser` callbacks into offset-aware nodes."""

    def __init__(self, source: str) -> None:
        super().__init__(convert_charrefs=True)
        self._source = source
        self._line_starts = [0] + [
            match.end() for match in re.finditer(r"\n", source)
        ]
        self._roots: list[TagNode] = []
        self._stack: list[TagNode] = []

    def _offset(self) -> int:
        line, column = self.getpos()
        return self._line_starts[line - 1] + column

    def _append(self, node: TagNode) -> None:
        if self._stack:
            self._stack[-1].children.append(node)
        else:
            self._roots.append(node)

    def _start_node(self, tag: str) -> TagNode:
        start = self._offset()
        text = self.get_starttag_text() or ""
        node = TagNode(
            name=tag,
            attributes=parse_attributes(text, start),
            start=start,
            open_end=start + len(text),
        )
        self._append(node)
        return node

    def handle_starttag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        node = self._start_node(tag)
        if tag in VOID_ELEMENTS:
            node.end = node.open_end
        else:
            self._stack.append(node)

    def handle_startendtag(
        self, tag: str, attrs: list[tuple[str, str | None]]
    ) -> None:
        node = self._start_node(tag)
        node.end = node.open_end

    def handle_endtag(self, tag: str) -> None:
        start = self._offset()
        close = self._source.find(">", start)
        end = len(self._source) if close == -1 else close + 1
        for index in range(len(self._stack) - 1, -1, -1):
            if self._stack[index].name == tag:
                # Unclosed descendants stop at this closing tag.
                for node in self._stack[index + 1 :]:
                    node.end = start
                self._stack[index].end = end
                del self._stack[index:]
                return
        # Stray end tag with no matching open element.

    def finish(self) -> list[TagNode]:
        for node in self._stack:
            node.end = len(self._source)
        self._stack.clear()
        return self._roots


__all__ = [
    "ATTRIBUTE_PATTERN",
    "VOID_ELEMENTS",
    "Attribute",
    "TagNode",
    "find_first",
    "parse_attributes",
    "parse_tags",
    "walk",
]
