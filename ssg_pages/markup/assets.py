"""Rewrite asset references into Liquid ``asset_url`` lookups.

Theme engines such as Shopify serve bundled files from their own CDN, so a
``<script src="/assets/app.abc123.js">`` emitted by the bundler has to become
``<script src="{{ 'app.abc123.js' | asset_url }}">`` before it can live in a
theme section. The helpers below only look at attributes; which tags get
rewritten is decided by :mod:`ssg_pages.markup.template_block`.
"""

from __future__ import annotations

import dataclasses as dc
import posixpath
import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .tagtree import Attribute, TagNode

ASSET_ATTRIBUTES = ("src", "href")


@dc.dataclass(slots=True, frozen=True)
class AssetRecord:
    """A file referenced by a tag through ``src`` or ``href``."""

    attr_name: str
    filename: str


def find_asset_ref(attributes: cabc.Iterable[Attribute]) -> AssetRecord | None:
    """Return the first ``src``/``href`` reference, stripped to its base name."""
    for attr in attributes:
        if attr.name in ASSET_ATTRIBUTES:
            if not attr.value:
                return None
            filename = posixpath.basename(attr.value)
            return AssetRecord(attr_name=attr.name, filename=filename) if filename else None
    return None


def stringify_other_attributes(attributes: cabc.Iterable[Attribute]) -> str:
    """Render every attribute except ``src``/``href`` in encounter order.

    Each attribute is written exactly as it appears in the source, with its
    quoting and entity references untouched.
    """
    return " ".join(
        attr.raw for attr in attributes if attr.name not in ASSET_ATTRIBUTES
    )


def asset_url(filename: str) -> str:
    """Return the Liquid expression resolving ``filename`` on the theme CDN."""
    return f"{{{{ '{filename}' | asset_url }}}}"


def rewrite_asset_tag(node: TagNode) -> tuple[str, AssetRecord] | None:
    """Rebuild ``node`` with its asset reference replaced by an ``asset_url`` lookup.

    Returns ``None`` when the tag carries no usable ``src``/``href``.
    """
    record = find_asset_ref(node.attributes)
    if record is None:
        return None
    others = stringify_other_attributes(node.attributes)
    parts = [part for part in (node.name, others) if part]
    parts.append(f'{record.attr_name}="{asset_url(record.filename)}"')
    return f"<{' '.join(parts)}></{node.name}>\n", record


__all__ = [
    "ASSET_ATTRIBUTES",
    "AssetRecord",
    "asset_url",
    "find_asset_ref",
    "rewrite_asset_tag",
    "stringify_other_attributes",
]
