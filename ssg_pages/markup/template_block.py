"""Compose portable Liquid blocks from a rendered shell document.

A template block carries the page's stylesheets, its rewritten script tags and
the server-rendered container, dropped into a caller supplied skeleton at the
``{%html%}`` and ``{%script%}`` slots. Two extraction modes exist and are kept
apart on purpose:

``ExtractionMode.ALL``
    every ``script``/``style``/``link`` tag except those carrying an
    ``ignore`` attribute.
``ExtractionMode.FILTERED``
    every ``style`` tag, plus ``script``/``link`` tags whose ``src``/``href``
    contains one of the filter substrings.

Example
-------
>>> block = compose(
...     '<script type="module" src="/assets/app.js"></script><div id="app"></div>',
...     "<p>hi</p>",
...     "<body>{%html%}{%script%}</body>",
...     "app",
... )
>>> block.referenced_files
['app.js']
"""

from __future__ import annotations

import dataclasses as dc
import enum
import re
import shutil
import typing as typ

from .assets import rewrite_asset_tag
from .injector import rendered_container
from .tagtree import TagNode, parse_tags, walk

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

HTML_SLOT = "{%html%}"
SCRIPT_SLOT = "{%script%}"
SEARCH_TAGS = frozenset({"script", "style", "link"})
IGNORE_ATTRIBUTE = "ignore"
_SLOT_PATTERN = re.compile(r"\{%(html|script)%\}")


class ExtractionMode(enum.Enum):
    """How tags are selected from the shell document."""

    ALL = "all"
    FILTERED = "filtered"


@dc.dataclass(slots=True)
class TemplateBlock:
    """A composed Liquid fragment and the files it references.

    Attributes
    ----------
    fragment : str
        Extracted styles followed by the filled skeleton.
    referenced_files : list[str]
        Base names of the scripts rewritten to ``asset_url`` lookups.
    stylesheet_files : list[str]
        Base names of the ``<link>`` targets rewritten to ``asset_url`` lookups.
    """

    fragment: str
    referenced_files: list[str] = dc.field(default_factory=list)
    stylesheet_files: list[str] = dc.field(default_factory=list)

    @property
    def asset_files(self) -> list[str]:
        """Script files followed by stylesheet files, as copied to a theme."""
        return [*self.referenced_files, *self.stylesheet_files]


def accepts_unfiltered(node: TagNode) -> bool:
    """Selection rule for :attr:`ExtractionMode.ALL`."""
    return node.name in SEARCH_TAGS and not node.has_attribute(IGNORE_ATTRIBUTE)


def accepts_filtered(node: TagNode, copy_filter: cabc.Sequence[str]) -> bool:
    """Selection rule for :attr:`ExtractionMode.FILTERED`."""
    if node.name == "style":
        return True
    if node.name not in SEARCH_TAGS:
        return False
    reference = node.get("src") or node.get("href") or ""
    return any(needle in reference for needle in copy_filter)


def fill_slots(skeleton: str, html: str, script: str) -> str:
    """Substitute the first ``{%html%}`` and ``{%script%}`` markers of ``skeleton``.

    The substitution runs in a single pass, so markers appearing inside the
    inserted content are left alone.
    """
    values = {"html": html, "script": script}

    def _replace(match: re.Match[str]) -> str:
        return values.pop(match.group(1), match.group(0))

    return _SLOT_PATTERN.sub(_replace, skeleton)


def compose(
    shell_html: str,
    rendered_markup: str,
    skeleton: str,
    container_id: str,
    extras: str = "",
    copy_filter: cabc.Sequence[str] | None = None,
) -> TemplateBlock:
    """Build a Liquid block from ``shell_html`` and the rendered markup.

    Parameters
    ----------
    shell_html : str
        Final page HTML whose ``script``, ``style`` and ``link`` tags are
        extracted.
    rendered_markup : str
        Markup produced by the server render pass.
    skeleton : str
        Liquid skeleton containing the ``{%html%}`` and ``{%script%}`` slots.
    container_id : str
        ``id`` of the server-rendered container element.
    extras : str, optional
        Markup placed after the container (e.g. initial state script).
    copy_filter : Sequence[str], optional
        When given, switches to :attr:`ExtractionMode.FILTERED`.

    Returns
    -------
    TemplateBlock
        The composed fragment and the referenced asset file names.
    """
    mode = ExtractionMode.FILTERED if copy_filter else ExtractionMode.ALL
    style_output = ""
    script_output = ""
    scripts: list[str] = []
    stylesheets: list[str] = []

    for node in walk(parse_tags(shell_html)):
        if mode is ExtractionMode.ALL:
            accepted = accepts_unfiltered(node)
        else:
            accepted = accepts_filtered(node, copy_filter or ())
        if not accepted:
            continue
        if node.name == "style":
            style_output = f"{shell_html[node.start : node.end]}\n{style_output}"
            continue
        rewritten = rewrite_asset_tag(node)
        if rewritten is None:
            continue
        tag_html, record = rewritten
        if node.name == "link":
            style_output += tag_html
            stylesheets.append(record.filename)
        else:
            script_output += tag_html
            scripts.append(record.filename)

    container = rendered_container(container_id, rendered_markup, extras)
    fragment = style_output + fill_slots(skeleton, container, script_output)
    return TemplateBlock(
        fragment=fragment, referenced_files=scripts, stylesheet_files=stylesheets
    )


def copy_to_theme(
    block: TemplateBlock, block_path: Path, out_dir: Path, theme_dir: Path
) -> list[Path]:
    """Copy a block and the assets it references into a theme directory.

    Assets are looked up under ``out_dir/assets`` first, then ``out_dir``;
    missing files are skipped. The block itself lands in
    ``theme_dir/sections``.
    """
    copied: list[Path] = []
    assets_dir = theme_dir / "assets"
    for filename in block.asset_files:
        source = next(
            (
                candidate
                for candidate in (out_dir / "assets" / filename, out_dir / filename)
                if candidate.is_file()
            ),
            None,
        )
        if source is None:
            continue
        assets_dir.mkdir(parents=True, exist_ok=True)
        target = assets_dir / filename
        shutil.copyfile(source, target)
        copied.append(target)

    sections_dir = theme_dir / "sections"
    sections_dir.mkdir(parents=True, exist_ok=True)
    section_target = sections_dir / block_path.name
    shutil.copyfile(block_path, section_target)
    copied.append(section_target)
    return copied


__all__ = [
    "HTML_SLOT",
    "IGNORE_ATTRIBUTE",
    "SCRIPT_SLOT",
    "SEARCH_TAGS",
    "ExtractionMode",
    "TemplateBlock",
    "accepts_filtered",
    "accepts_unfiltered",
    "compose",
    "copy_to_theme",
    "fill_slots",
]
