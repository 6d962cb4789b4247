"""Unit tests for host configuration loading and option merging."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from ssg_pages.config import (
    BuildOptions,
    ConfigurationError,
    EntrySpec,
    build_options,
    load_host_config,
    merge_options,
    resolve_hook,
)
from ssg_pages.markup.critical import CriticalCssOptions

if typ.TYPE_CHECKING:
    import collections.abc as cabc


def _write_config(tmp_path: Path, body: str) -> Path:
    path = tmp_path / "ssg.yaml"
    path.write_text(body.strip() + "\n", encoding="utf-8")
    return path


def after_render(html: str, ctx: object) -> str:
    return html


def test_load_host_config_reads_sections(tmp_path: Path) -> None:
    path = _write_config(
        tmp_path,
        """
root: site
base: /docs/
build:
  outDir: public_html
  command: npx vite build
resolve:
  alias:
    "@/": src/
ssgOptions:
  script: async
  mock: true
""",
    )
    config = load_host_config(path)
    assert config.root == (tmp_path / "site").resolve()
    assert config.base == "/docs/"
    assert config.out_dir == "public_html"
    assert config.build_command == ["npx", "vite", "build"]
    assert config.alias == {"@/": "src/"}
    assert config.extensions == [".py"]
    assert config.ssg_options == {"script": "async", "mock": True}


def test_load_host_config_defaults_without_file(tmp_path: Path) -> None:
    config = load_host_config(None, cwd=tmp_path)
    assert config.path is None
    assert config.root == tmp_path.resolve()
    assert config.out_dir == "dist"
    assert config.ssg_options == {}


def test_load_host_config_finds_default_file(tmp_path: Path) -> None:
    _write_config(tmp_path, "ssg_options:\n  formatting: minify")
    config = load_host_config(None, cwd=tmp_path)
    assert config.path == tmp_path / "ssg.yaml"
    assert config.ssg_options == {"formatting": "minify"}


def test_load_host_config_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="not found"):
        load_host_config(tmp_path / "nope.yaml")


@pytest.mark.parametrize(
    "body",
    ["- just\n- a list", "build: [1, 2]", "resolve:\n  alias: [a]"],
)
def test_load_host_config_rejects_bad_shapes(tmp_path: Path, body: str) -> None:
    with pytest.raises(ConfigurationError):
        load_host_config(_write_config(tmp_path, body))


def test_merge_options_caller_wins_and_none_falls_through() -> None:
    merged = merge_options(
        {"script": "async", "mock": True, "rootContainerId": "root"},
        {"script": "defer", "mock": None, "base": None},
    )
    assert merged == {"script": "defer", "mock": True, "root_container_id": "root"}


def test_build_options_defaults() -> None:
    options = build_options({})
    assert options == BuildOptions()
    assert options.resolve_entries("src/app.py") == (
        EntrySpec(name="index", template="index.html", entry="src/app.py"),
    )


def test_build_options_parses_entries_and_critical_css() -> None:
    options = build_options(
        {
            "base": "/docs/",
            "entrys": [
                {"name": "home", "template": "home.html", "entry": "src/home.py"},
                {"name": "about", "templateFile": "theme/about.liquid"},
            ],
            "critical_css": {"preload": "swap", "max_inline_bytes": 2048},
            "copy_filter": "app.",
        }
    )
    assert options.multi_entry
    assert [entry.name for entry in options.entries] == ["home", "about"]
    assert options.entries[1] == EntrySpec(
        name="about", template_file="theme/about.liquid"
    )
    assert options.critical_css == CriticalCssOptions(
        preload="swap", max_inline_bytes=2048, base="/docs/"
    )
    assert options.copy_filter == ("app.",)


def test_build_options_resolves_hook_strings() -> None:
    options = build_options({"on_page_rendered": f"{__name__}:after_render"})
    assert options.on_page_rendered is after_render


@pytest.mark.parametrize(
    ("options", "message"),
    [
        ({"script": "lazy"}, "script"),
        ({"formatting": "pretty"}, "formatting"),
        ({"format": "umd"}, "format"),
        ({"routes": ["/"]}, "Unknown ssg option"),
        ({"entries": [{"template": "a.html"}]}, "missing 'name'"),
        ({"entries": "index"}, "entries"),
        ({"critical_css": "yes"}, "critical_css"),
        ({"critical_css": {"preload": "eager"}}, "preload"),
    ],
)
def test_build_options_rejects_invalid_values(
    options: cabc.Mapping[str, typ.Any], message: str
) -> None:
    with pytest.raises(ConfigurationError, match=message):
        build_options(options)


@pytest.mark.parametrize(
    "value", ["not-a-reference", "ssg_pages.missing:thing", "ssg_pages.errors:LOG_PREFIX"]
)
def test_resolve_hook_rejects_unusable_references(value: str) -> None:
    with pytest.raises(ConfigurationError):
        resolve_hook("on_finished", value)


def test_resolve_hook_passes_callables_through() -> None:
    assert resolve_hook("on_finished", print) is print
    assert resolve_hook("on_finished", None) is None
