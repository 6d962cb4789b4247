"""Unit tests for splicing rendered markup into shell documents."""

from __future__ import annotations

import pytest

from ssg_pages.errors import InjectionTargetNotFound
from ssg_pages.markup.injector import inject

MARKER = 'data-server-rendered="true"'


@pytest.mark.parametrize(
    "markup",
    ["<p>hi</p>", "", "<ul><li>a</li><li>b</li></ul>", "plain text & more"],
)
def test_fast_path_replaces_empty_container(markup: str) -> None:
    """An empty ``<div id="app"></div>`` is swapped for the rendered container."""
    shell = '<html><body><div id="app"></div><script src="/a.js"></script></body></html>'
    result = inject(shell, "app", markup)
    assert f'<div id="app" {MARKER}>{markup}</div>' in result
    assert '<div id="app"></div>' not in result
    assert result.endswith('<script src="/a.js"></script></body></html>')


def test_fast_path_places_extras_after_container() -> None:
    shell = '<body><div id="app"></div></body>'
    extras = "<script>window.__INITIAL_STATE__={}</script>"
    result = inject(shell, "app", "<p>x</p>", extras)
    assert result == f'<body><div id="app" {MARKER}><p>x</p></div>{extras}</body>'


def test_fast_path_only_replaces_first_container() -> None:
    shell = '<div id="app"></div><div id="app"></div>'
    result = inject(shell, "app", "M")
    assert result == f'<div id="app" {MARKER}>M</div><div id="app"></div>'


def test_fallback_preserves_other_attributes() -> None:
    """Extra attributes force the structural path and survive verbatim."""
    shell = '<body><div id="app" class="x"></div></body>'
    result = inject(shell, "app", "<p>hi</p>")
    assert result == f'<body><div id="app" class="x" {MARKER}><p>hi</p></div></body>'
    assert result.count(MARKER) == 1


def test_fallback_keeps_original_quoting_and_order() -> None:
    shell = "<body><main class='shell' data-x id='root' hidden>old</main></body>"
    result = inject(shell, "root", "new")
    assert result == (
        f"<body><main class='shell' data-x id='root' hidden {MARKER}>new</main></body>"
    )


def test_fallback_replaces_placeholder_children() -> None:
    shell = (
        '<body>\n  <div id="app">\n    <span class="spinner">loading</span>\n'
        "  </div>\n  <footer>f</footer>\n</body>"
    )
    result = inject(shell, "app", "<h1>Rendered</h1>")
    assert "loading" not in result
    assert f'<div id="app" {MARKER}><h1>Rendered</h1></div>' in result
    assert result.endswith("\n  <footer>f</footer>\n</body>")


def test_fallback_does_not_duplicate_marker() -> None:
    shell = f'<div id="app" {MARKER} class="a">stale</div>'
    result = inject(shell, "app", "fresh")
    assert result == f'<div id="app" class="a" {MARKER}>fresh</div>'


def test_fallback_uses_first_match_only() -> None:
    shell = '<section id="app" class="one"></section><section id="app" class="two"></section>'
    result = inject(shell, "app", "M")
    assert result.count(MARKER) == 1
    assert result.endswith('<section id="app" class="two"></section>')


def test_fallback_places_extras_after_closing_tag() -> None:
    shell = '<body><div class="c" id="app"></div></body>'
    result = inject(shell, "app", "M", "<script>s()</script>")
    assert result == (
        f'<body><div class="c" id="app" {MARKER}>M</div><script>s()</script></body>'
    )


@pytest.mark.parametrize(
    "shell",
    [
        "",
        "<html><body></body></html>",
        '<div id="application"></div>',
        '<div class="app"></div>',
        '<div data-id="app"></div>',
    ],
)
def test_missing_container_raises(shell: str) -> None:
    with pytest.raises(InjectionTargetNotFound, match='id="app"') as excinfo:
        inject(shell, "app", "<p>hi</p>")
    assert excinfo.value.container_id == "app"
