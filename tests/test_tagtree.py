"""Unit tests for the offset-preserving tag tree.

The splicing helpers rely on exact offsets, so these tests assert on slices of
the source document rather than on re-serialised markup.
"""

from __future__ import annotations

from ssg_pages.markup.tagtree import find_first, parse_attributes, parse_tags, walk

SHELL = (
    "<!DOCTYPE html>\n"
    "<html>\n"
    "  <head><meta charset=\"utf-8\"><title>Shell</title></head>\n"
    "  <body>\n"
    "    <div id=\"app\" class='shell'><span>loading</span></div>\n"
    "  </body>\n"
    "</html>\n"
)


def test_offsets_cover_the_element_source() -> None:
    """Each node's start/end slice should reproduce the element text."""
    nodes = parse_tags(SHELL)
    container = find_first(nodes, lambda node: node.get("id") == "app")
    assert container is not None
    assert SHELL[container.start : container.end] == (
        "<div id=\"app\" class='shell'><span>loading</span></div>"
    )
    assert SHELL[container.start : container.open_end] == (
        "<div id=\"app\" class='shell'>"
    )


def test_attributes_keep_raw_quoting_and_offsets() -> None:
    """Raw attribute text and offsets should match the source document."""
    nodes = parse_tags(SHELL)
    container = find_first(nodes, lambda node: node.name == "div")
    assert container is not None
    assert [attr.raw for attr in container.attributes] == ['id="app"', "class='shell'"]
    assert [attr.value for attr in container.attributes] == ["app", "shell"]
    for attr in container.attributes:
        assert SHELL[attr.start : attr.end] == attr.raw


def test_void_elements_do_not_swallow_siblings() -> None:
    """``<meta>`` must end at its own ``>`` so ``<title>`` stays a sibling."""
    nodes = parse_tags(SHELL)
    head = find_first(nodes, lambda node: node.name == "head")
    assert head is not None
    assert [child.name for child in head.children] == ["meta", "title"]
    meta = head.children[0]
    assert SHELL[meta.start : meta.end] == '<meta charset="utf-8">'


def test_walk_is_depth_first_in_document_order() -> None:
    """Pre-order traversal should list parents before their children."""
    names = [node.name for node in walk(parse_tags(SHELL))]
    assert names == ["html", "head", "meta", "title", "body", "div", "span"]


def test_unclosed_children_end_at_parent_close() -> None:
    """Elements left open are closed where their ancestor closes."""
    html = "<div id=\"a\"><p>one<p>two</div><footer></footer>"
    nodes = parse_tags(html)
    div = nodes[0]
    assert html[div.start : div.end] == "<div id=\"a\"><p>one<p>two</div>"
    closing = html.index("</div>")
    assert all(node.end == closing for node in walk(div.children))
    assert [node.name for node in nodes] == ["div", "footer"]


def test_unterminated_document_closes_at_eof() -> None:
    html = "<section><article>text"
    nodes = parse_tags(html)
    assert [node.end for node in walk(nodes)] == [len(html), len(html)]


def test_valueless_attributes_have_no_value() -> None:
    """Boolean attributes should be reported with ``value`` set to ``None``."""
    attrs = parse_attributes('<script type="module" crossorigin src="/a.js">')
    assert [(attr.name, attr.value) for attr in attrs] == [
        ("type", "module"),
        ("crossorigin", None),
        ("src", "/a.js"),
    ]
