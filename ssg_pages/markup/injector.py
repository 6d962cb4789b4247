"""Splice server-rendered markup into a shell document.

The common case is a shell carrying an empty ``<div id="app"></div>``; that
is handled with a single textual replacement. Anything else (extra
attributes, placeholder children, a different tag) goes through the tag tree
and is rebuilt around the recorded offsets of the first matching element.
"""

from __future__ import annotations

import typing as typ

from ssg_pages.errors import InjectionTargetNotFound

from .tagtree import TagNode, find_first, parse_tags

if typ.TYPE_CHECKING:
    import collections.abc as cabc

SERVER_RENDERED_ATTRIBUTE = 'data-server-rendered="true"'


def empty_container(container_id: str) -> str:
    return f'<div id="{container_id}"></div>'


def rendered_container(container_id: str, markup: str, extras: str = "") -> str:
    """Return the server-rendered replacement for an empty container."""
    return (
        f'<div id="{container_id}" {SERVER_RENDERED_ATTRIBUTE}>{markup}</div>'
        f"{extras}"
    )


def has_container_id(container_id: str) -> cabc.Callable[[TagNode], bool]:
    """Return a predicate matching elements whose ``id`` equals ``container_id``."""

    def _matches(node: TagNode) -> bool:
        return any(
            attr.name == "id" and attr.value == container_id
            for attr in node.attributes
        )

    return _matches


def find_container(nodes: cabc.Iterable[TagNode], container_id: str) -> TagNode | None:
    """Return the first element in document order with the given id."""
    return find_first(nodes, has_container_id(container_id))


def open_tag_with_marker(node: TagNode) -> str:
    """Rebuild the opening tag of ``node`` with the server-rendered marker.

    Attributes keep their original order and quoting; an existing marker is
    not duplicated.
    """
    parts = [node.name]
    parts.extend(
        attr.raw for attr in node.attributes if attr.name != "data-server-rendered"
    )
    parts.append(SERVER_RENDERED_ATTRIBUTE)
    return f"<{' '.join(parts)}>"


def inject(
    shell_html: str, container_id: str, rendered_markup: str, extras: str = ""
) -> str:
    """Return ``shell_html`` with the container replaced by rendered markup.

    Parameters
    ----------
    shell_html : str
        The shell document the client application mounts into.
    container_id : str
        ``id`` of the element hosting the application.
    rendered_markup : str
        Markup produced by the server render pass.
    extras : str, optional
        Additional markup (for example the serialised initial state script)
        placed right after the container element.

    Returns
    -------
    str
        The injected document.

    Raises
    ------
    InjectionTargetNotFound
        If no element carries ``id == container_id``.
    """
    placeholder = empty_container(container_id)
    if placeholder in shell_html:
        return shell_html.replace(
            placeholder,
            rendered_container(container_id, rendered_markup, extras),
            1,
        )

    node = find_container(parse_tags(shell_html), container_id)
    if node is None:
        raise InjectionTargetNotFound(container_id)

    before = shell_html[: node.start]
    after = shell_html[node.end :]
    element = f"{open_tag_with_marker(node)}{rendered_markup}</{node.name}>"
    return f"{before}{element}{extras}{after}"


__all__ = [
    "SERVER_RENDERED_ATTRIBUTE",
    "empty_container",
    "find_container",
    "has_container_id",
    "inject",
    "open_tag_with_marker",
    "rendered_container",
]
