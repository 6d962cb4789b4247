"""Typed dataclasses describing a pre-render build run."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import typing as typ
from pathlib import Path

from ssg_pages.errors import ConfigurationError
from ssg_pages.markup.critical import CriticalCssOptions
from ssg_pages.markup.formatting import Formatting
from ssg_pages.render.server_module import OutputFormat

ScriptMode = typ.Literal["sync", "async", "defer", "async defer"]
SCRIPT_CHOICES: tuple[str, ...] = typ.get_args(ScriptMode)

BeforeRenderHook = cabc.Callable[[str, typ.Any], str | None]
RenderedHook = cabc.Callable[[str, typ.Any], str | None]
FinishedHook = cabc.Callable[[], typ.Any]

DEFAULT_TEMPLATE = "index.html"
DEFAULT_ENTRY = "src/main.py"
DEFAULT_CONTAINER_ID = "app"
DEFAULT_OUT_DIR = "dist"


@dc.dataclass(slots=True, frozen=True)
class EntrySpec:
    """One page to build.

    Attributes
    ----------
    name : str
        Output basename; the page is written to ``<name>.html``.
    template : str
        Shell HTML path, relative to the project root.
    entry : str
        Server entry module, resolved through the configured aliases.
    template_file : str | None
        Liquid skeleton used to compose ``<name>.liquid``.
    """

    name: str
    template: str = DEFAULT_TEMPLATE
    entry: str = DEFAULT_ENTRY
    template_file: str | None = None


@dc.dataclass(slots=True, frozen=True)
class BuildOptions:
    """Effective options for one build run."""

    script: ScriptMode = "sync"
    mock: bool = False
    formatting: Formatting = "none"
    format: OutputFormat = "esm"
    root_container_id: str = DEFAULT_CONTAINER_ID
    mode: str | None = None
    base: str | None = None
    entry: str | None = None
    template: str = DEFAULT_TEMPLATE
    template_file: str | None = None
    entries: tuple[EntrySpec, ...] = ()
    critical_css: CriticalCssOptions | None = None
    copy_filter: tuple[str, ...] = ()
    theme_dir: Path | None = None
    on_before_page_render: BeforeRenderHook | None = None
    on_page_rendered: RenderedHook | None = None
    on_finished: FinishedHook | None = None

    @property
    def multi_entry(self) -> bool:
        return bool(self.entries)

    def resolve_entries(self, detected_entry: str) -> tuple[EntrySpec, ...]:
        """Return the explicit entries or a single entry synthesised from options."""
        if self.entries:
            return self.entries
        name = Path(self.template).stem or "index"
        return (
            EntrySpec(
                name=name,
                template=self.template,
                entry=self.entry or detected_entry,
                template_file=self.template_file,
            ),
        )


@dc.dataclass(slots=True)
class HostConfig:
    """The host build configuration file, before any resolution."""

    path: Path | None
    root: Path
    mode: str | None = None
    base: str | None = None
    out_dir: str = DEFAULT_OUT_DIR
    build_command: list[str] = dc.field(default_factory=list)
    alias: dict[str, str] = dc.field(default_factory=dict)
    extensions: list[str] = dc.field(default_factory=lambda: [".py"])
    public_dir: str | None = "public"
    ssg_options: dict[str, typ.Any] = dc.field(default_factory=dict)


__all__ = [
    "DEFAULT_CONTAINER_ID",
    "DEFAULT_ENTRY",
    "DEFAULT_OUT_DIR",
    "DEFAULT_TEMPLATE",
    "SCRIPT_CHOICES",
    "BeforeRenderHook",
    "BuildOptions",
    "ConfigurationError",
    "EntrySpec",
    "FinishedHook",
    "HostConfig",
    "RenderedHook",
    "ScriptMode",
]
