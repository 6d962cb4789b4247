"""Pre-render a client application into static HTML pages.

:class:`SSGBuilder` sequences one build run: it resolves the host
configuration, clears the output directory, and for every entry runs the
client pass, the server pass, loads the server bundle, renders the
application and splices the markup into the shell document. Intermediate
server bundles live in a private ``.vite-ssg-temp/<random>`` directory that is
removed on every exit path.

Examples
--------
Build the project in the current directory with deferred scripts:

>>> from ssg_pages.pipeline import build
>>> build({"script": "defer"})  # doctest: +SKIP
[PosixPath('.../dist/index.html')]
"""

from __future__ import annotations

import collections.abc as cabc
import contextlib
import dataclasses as dc
import logging
import os
import re
import shutil
import tempfile
import traceback
import typing as typ
from pathlib import Path

from ._constants import (
    DEFAULT_NODE_ENV,
    MODE_ENV,
    NODE_ENV,
    SIZE_TEMPLATE,
    SSG_PASS_ENV,
    TEMP_DIR_NAME,
)
from .bundler import BuildSpec, Bundler, ProjectBundler, ResolvedConfig, resolve_config
from .config import BuildOptions, EntrySpec, build_options, merge_options
from .config.models import DEFAULT_ENTRY
from .errors import BuildError, MissingEntryError, RenderError
from .markup import (
    CriticalCssOptions,
    CriticalCssProcessor,
    compose,
    copy_to_theme,
    format_html,
    get_critical_processor,
    inject,
    serialize_document,
)
from .render import MockDom, SSRContext, load_server_module, render_to_string
from .render.server_module import server_bundle_path

if typ.TYPE_CHECKING:
    from .render import Renderer

logger = logging.getLogger(__name__)

SCRIPT_SRC_PATTERN = re.compile(
    r"<script.*?src=[\"'](.+?)[\"'](?!<).*>\s*</script>", re.IGNORECASE
)
SCRIPT_TYPE_PATTERN = re.compile(r".*\stype=(?:'|\")?([^>'\"\s]+)", re.IGNORECASE)
MODULE_SCRIPT_TAG = '<script type="module" '


def detect_entry(html: str, default: str = DEFAULT_ENTRY) -> str:
    """Return the ``src`` of the first ``type="module"`` script in ``html``.

    Falls back to ``default`` when the document has no module script.

    >>> detect_entry('<script type="module" src="/src/main.py"></script>')
    '/src/main.py'
    >>> detect_entry("<p>static</p>")
    'src/main.py'
    """
    for match in SCRIPT_SRC_PATTERN.finditer(html):
        kind = SCRIPT_TYPE_PATTERN.match(match.group(0))
        if kind is not None and kind.group(1) == "module":
            return match.group(1)
    return default


def rewrite_scripts(html: str, mode: str | None) -> str:
    """Add the loading ``mode`` attribute to every module script tag."""
    if not mode or mode == "sync":
        return html
    return html.replace(MODULE_SCRIPT_TAG, f'<script type="module" {mode} ')


def format_size(text: str) -> str:
    """Return the size of ``text`` in KiB, as shown in the build log."""
    return SIZE_TEMPLATE.format(size=len(text) / 1024)


@contextlib.contextmanager
def temp_workspace(root: Path) -> cabc.Iterator[Path]:
    """Yield a private directory under ``root/.vite-ssg-temp``.

    A stale parent left by an earlier run is removed first. The private
    directory, and the parent once empty, are removed when the block exits,
    whether or not it raised.
    """
    parent = root / TEMP_DIR_NAME
    if parent.exists():
        shutil.rmtree(parent)
    parent.mkdir(parents=True)
    workspace = Path(tempfile.mkdtemp(dir=parent))
    try:
        yield workspace
    finally:
        shutil.rmtree(workspace, ignore_errors=True)
        with contextlib.suppress(OSError):
            parent.rmdir()


def _absolute(root: Path, value: str | Path) -> Path:
    path = Path(value)
    return path if path.is_absolute() else root / path


def _critical_options(
    options: CriticalCssOptions | None, base: str | None
) -> CriticalCssOptions | None:
    """Bind critical-CSS ``options`` to the base path the pages are built for."""
    if options is None:
        return None
    return dc.replace(options, base=base or "/")


@dc.dataclass(slots=True)
class _RunState:
    """Values shared by every entry of one build run."""

    config: ResolvedConfig
    options: BuildOptions
    out_dir: Path
    workspace: Path
    base: str | None
    critical: CriticalCssProcessor | None


class SSGBuilder:
    """Run the client build, server build, and pre-render pass.

    Parameters
    ----------
    options : Mapping, optional
        Caller supplied ``ssg_options``; they win over the host configuration.
        ``None`` values are ignored.
    tool_config : Mapping, optional
        Host configuration overrides: ``config_file``, ``root``, ``out_dir``
        and ``base``.
    bundler : Bundler or callable, optional
        Bundler instance, or factory receiving the resolved configuration.
        Defaults to :class:`ProjectBundler`.
    renderer : Renderer, optional
        Callable turning an application into markup. Defaults to
        :func:`render_to_string`.
    cwd : Path, optional
        Working directory used to locate the default configuration file.
    """

    def __init__(
        self,
        options: cabc.Mapping[str, typ.Any] | None = None,
        tool_config: cabc.Mapping[str, typ.Any] | None = None,
        *,
        bundler: Bundler | cabc.Callable[[ResolvedConfig], Bundler] | None = None,
        renderer: Renderer = render_to_string,
        cwd: Path | None = None,
    ) -> None:
        self.overrides = dict(options or {})
        self.tool_config = dict(tool_config or {})
        self._bundler = bundler
        self.renderer = renderer
        self.cwd = cwd
        self.bundler: Bundler | None = None

    def run(self) -> list[Path]:
        """Build every entry and return the written files.

        Raises
        ------
        RenderError
            If rendering, splicing, or formatting a page fails.
        BuildError
            If one or more entries of a multi-entry run failed.
        """
        node_env = os.environ.get(NODE_ENV) or DEFAULT_NODE_ENV
        mode = os.environ.get(MODE_ENV) or self.overrides.get("mode") or node_env
        config = resolve_config(self.tool_config, "build", mode, node_env, cwd=self.cwd)
        root = config.root
        self.bundler = self._make_bundler(config)

        out_dir = config.out_path()
        if out_dir.exists():
            shutil.rmtree(out_dir)

        options = build_options(merge_options(config.ssg_options, self.overrides))
        entries = self._entries(root, options)
        base = options.base or config.host.base

        written: list[Path] = []
        failures: list[str] = []
        with temp_workspace(root) as workspace:
            state = _RunState(
                config=config,
                options=options,
                out_dir=out_dir,
                workspace=workspace,
                base=base,
                critical=get_critical_processor(
                    out_dir, _critical_options(options.critical_css, base)
                ),
            )
            if state.critical is not None:
                logger.info("Critical CSS generation enabled")
            for entry in entries:
                try:
                    written.extend(self._build_entry(entry, state))
                except Exception:
                    if not options.multi_entry:
                        raise
                    logger.exception("Entry %s failed", entry.name)
                    failures.append(entry.name)

        if failures:
            msg = f"Failed to build entries: {', '.join(failures)}"
            raise BuildError(msg, stage="render")

        logger.info("Build finished.")
        if options.on_finished is not None:
            options.on_finished()
        return written

    def _make_bundler(self, config: ResolvedConfig) -> Bundler:
        if self._bundler is None:
            return ProjectBundler(config)
        if hasattr(self._bundler, "build"):
            return typ.cast("Bundler", self._bundler)
        return self._bundler(config)

    def _entries(self, root: Path, options: BuildOptions) -> tuple[EntrySpec, ...]:
        if options.entries or options.entry:
            return options.resolve_entries(options.entry or DEFAULT_ENTRY)
        shell = root / options.template
        detected = DEFAULT_ENTRY
        if shell.is_file():
            detected = detect_entry(shell.read_text(encoding="utf-8"))
        return options.resolve_entries(detected)

    def _resolve_entry(self, config: ResolvedConfig, entry: str) -> Path:
        resolver = config.create_resolver()
        resolved = resolver(entry, config.root)
        return resolved or config.root / entry.lstrip("/")

    def _build_entry(self, entry: EntrySpec, state: _RunState) -> list[Path]:
        config = state.config
        options = state.options
        root = config.root
        bundler = typ.cast("Bundler", self.bundler)
        logger.info("Build %s start...", entry.name)

        os.environ[SSG_PASS_ENV] = "false"
        bundler.build(
            BuildSpec(
                out_dir=state.out_dir,
                mode=config.mode,
                name=entry.name,
                template=_absolute(root, entry.template),
                base=state.base,
            )
        )
        shell_path = state.out_dir / f"{entry.name}.html"
        if not shell_path.is_file():
            msg = f"Shell document {shell_path} does not exist"
            raise MissingEntryError(msg, stage="read")
        shell = shell_path.read_text(encoding="utf-8")
        mock = MockDom.create(shell) if options.mock else None

        ssr_entry = self._resolve_entry(config, entry.entry)
        os.environ[SSG_PASS_ENV] = "true"
        bundler.build(
            BuildSpec(
                out_dir=state.workspace,
                mode=config.mode,
                base=state.base,
                ssr=ssr_entry,
                format=options.format,
                minify=False,
                css_code_split=False,
            )
        )
        server = load_server_module(
            server_bundle_path(state.workspace, ssr_entry, options.format),
            options.format,
            search_path=root,
            init_globals=mock.as_globals() if mock else None,
        )
        shell = rewrite_scripts(shell, options.script)

        try:
            return self._render_entry(entry, state, server, shell, mock)
        except Exception as exc:
            raise RenderError(entry.name, traceback.format_exc()) from exc

    def _render_entry(
        self,
        entry: EntrySpec,
        state: _RunState,
        server: typ.Any,
        shell: str,
        mock: MockDom | None,
    ) -> list[Path]:
        options = state.options
        root = state.config.root
        app_ctx = server.create_context(is_client=False)
        if options.on_before_page_render is not None:
            shell = options.on_before_page_render(shell, app_ctx) or shell

        ssr_context = SSRContext(globals=mock.as_globals() if mock else {})
        markup = self.renderer(app_ctx.app, ssr_context)
        if app_ctx.on_rendered is not None:
            app_ctx.on_rendered()
        extras = app_ctx.state_script()

        injected = inject(shell, options.root_container_id, markup, extras)
        html = serialize_document(injected)
        if options.on_page_rendered is not None:
            html = options.on_page_rendered(html, app_ctx) or html
        if state.critical is not None:
            html = state.critical.process(html)
        formatted = format_html(html, options.formatting)

        written: list[Path] = []
        if entry.template_file:
            skeleton = _absolute(root, entry.template_file).read_text(encoding="utf-8")
            block = compose(
                html,
                markup,
                skeleton,
                options.root_container_id,
                extras,
                options.copy_filter or None,
            )
            block_path = self._write(state, f"{entry.name}.liquid", block.fragment)
            written.append(block_path)
            if options.theme_dir is not None:
                written.extend(
                    copy_to_theme(
                        block,
                        block_path,
                        state.out_dir,
                        _absolute(root, options.theme_dir),
                    )
                )

        written.append(self._write(state, f"{entry.name}.html", formatted))
        return written

    def _write(self, state: _RunState, filename: str, text: str) -> Path:
        target = state.out_dir / filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(text, encoding="utf-8")
        logger.info(
            "%s/%s  %s", state.config.out_dir, filename.ljust(15), format_size(text)
        )
        return target


def build(
    options: cabc.Mapping[str, typ.Any] | None = None,
    tool_config: cabc.Mapping[str, typ.Any] | None = None,
    **kwargs: typ.Any,
) -> list[Path]:
    """Run a complete build; see :class:`SSGBuilder` for the parameters."""
    return SSGBuilder(options, tool_config, **kwargs).run()


__all__ = [
    "SSGBuilder",
    "build",
    "detect_entry",
    "format_size",
    "rewrite_scripts",
    "temp_workspace",
]
