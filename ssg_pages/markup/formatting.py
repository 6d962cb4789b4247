"""Final-pass formatting for rendered pages.

``serialize_document`` runs the injected page through BeautifulSoup so the
written bytes are a well-formed serialisation; ``format_html`` then applies
the configured formatting mode. Errors raised by the underlying libraries are
not caught here.
"""

from __future__ import annotations

import re
import typing as typ

import csscompressor
import htmlmin
import jsmin
from bs4 import BeautifulSoup, Doctype, NavigableString
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from bs4 import Tag

Formatting = typ.Literal["none", "minify", "prettify"]
FORMATTING_CHOICES: tuple[str, ...] = typ.get_args(Formatting)

JS_SCRIPT_TYPES = frozenset(
    {"", "module", "text/javascript", "application/javascript"}
)
INLINE_SCRIPT_PATTERN = re.compile(
    r"(?P<open><script(?P<attrs>[^>]*)>)(?P<body>.*?)(?P<close></script\s*>)",
    re.IGNORECASE | re.DOTALL,
)
INLINE_STYLE_PATTERN = re.compile(
    r"(?P<open><style[^>]*>)(?P<body>.*?)(?P<close></style\s*>)",
    re.IGNORECASE | re.DOTALL,
)
_TYPE_ATTRIBUTE = re.compile(r"""\btype\s*=\s*["']?([^"'\s>]+)""", re.IGNORECASE)
_SRC_ATTRIBUTE = re.compile(r"\bsrc\s*=", re.IGNORECASE)


class SourceOrderFormatter(HTMLFormatter):
    """HTML5 formatter that writes attributes in document order.

    The stock :class:`HTMLFormatter` sorts attributes alphabetically.
    """

    def attributes(self, tag: Tag) -> cabc.Iterable[tuple[str, typ.Any]]:
        if tag.attrs is None:
            return []
        return [
            (key, None if self.empty_attributes_are_booleans and value == "" else value)
            for key, value in tag.attrs.items()
        ]


HTML5_FORMATTER = SourceOrderFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)

# Whitespace-only text below these tags is kept as written. ``[document]`` is
# the root of every soup, so listing it keeps indentation everywhere.
PRESERVE_WHITESPACE_TAGS = frozenset({"[document]", "pre", "textarea"})

HTMLMIN_OPTIONS: dict[str, bool] = {
    "remove_comments": False,
    "remove_empty_space": False,
    "remove_all_empty_space": False,
    "reduce_boolean_attributes": False,
    "remove_optional_attribute_quotes": False,
    "convert_charrefs": False,
    "keep_pre": True,
}


def parse_document(html: str) -> BeautifulSoup:
    """Parse ``html`` keeping whitespace between tags as written."""
    soup = BeautifulSoup(
        html, "html.parser", preserve_whitespace_tags=PRESERVE_WHITESPACE_TAGS
    )
    _drop_doctype_newline(soup)
    return soup


def _drop_doctype_newline(soup: BeautifulSoup) -> None:
    # Doctype output always ends with a newline of its own.
    for node in soup.contents:
        if not isinstance(node, Doctype):
            continue
        following = node.next_sibling
        if type(following) is NavigableString and following.startswith("\n"):
            rest = following[1:]
            if rest:
                following.replace_with(NavigableString(rest))
            else:
                following.extract()
        return


def serialize_document(html: str) -> str:
    """Round-trip ``html`` through BeautifulSoup and return the serialisation.

    Attribute order and whitespace between tags are kept; entities are
    normalised and empty attributes are written as booleans.

    >>> serialize_document('<div id="app" class="z">\\n  <p>a</p>\\n</div>')
    '<div id="app" class="z">\\n  <p>a</p>\\n</div>'
    """
    return parse_document(html).decode(formatter=HTML5_FORMATTER)


def format_html(html: str, formatting: Formatting | str = "none") -> str:
    """Apply ``formatting`` to ``html``.

    Parameters
    ----------
    html : str
        Complete page HTML.
    formatting : {"none", "minify", "prettify"}
        ``none`` returns the input unchanged; ``minify`` collapses whitespace
        and compresses inline scripts and styles; ``prettify`` re-indents the
        document.

    Returns
    -------
    str
        The formatted document.

    Raises
    ------
    ValueError
        If ``formatting`` is not a known mode.
    """
    match formatting:
        case "none":
            return html
        case "minify":
            return minify_html(html)
        case "prettify":
            return prettify_html(html)
        case _:
            choices = ", ".join(FORMATTING_CHOICES)
            msg = f"Unknown formatting mode {formatting!r}; expected one of {choices}."
            raise ValueError(msg)


def minify_html(html: str) -> str:
    """Minify ``html`` along with its inline JavaScript and CSS."""
    compressed = INLINE_STYLE_PATTERN.sub(_minify_style, html)
    compressed = INLINE_SCRIPT_PATTERN.sub(_minify_script, compressed)
    return htmlmin.minify(compressed, **HTMLMIN_OPTIONS)


def prettify_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    return soup.prettify(formatter=HTML5_FORMATTER)


def _minify_script(match: re.Match[str]) -> str:
    attrs = match.group("attrs")
    body = match.group("body")
    if _SRC_ATTRIBUTE.search(attrs) or not body.strip():
        return match.group(0)
    type_match = _TYPE_ATTRIBUTE.search(attrs)
    script_type = type_match.group(1).lower() if type_match else ""
    if script_type not in JS_SCRIPT_TYPES:
        return match.group(0)
    minified = jsmin.jsmin(body, quote_chars="'\"`")
    return f"{match.group('open')}{minified}{match.group('close')}"


def _minify_style(match: re.Match[str]) -> str:
    body = match.group("body")
    if not body.strip():
        return match.group(0)
    minified = csscompressor.compress(body)
    return f"{match.group('open')}{minified}{match.group('close')}"


__all__ = [
    "FORMATTING_CHOICES",
    "HTML5_FORMATTER",
    "Formatting",
    "PRESERVE_WHITESPACE_TAGS",
    "SourceOrderFormatter",
    "format_html",
    "minify_html",
    "parse_document",
    "prettify_html",
    "serialize_document",
]
