"""Load the server bundle produced by the server build pass.

Two output formats exist. ``esm`` bundles are Python sources imported through
the importlib machinery, yielding a fresh module object. ``cjs`` bundles are
byte-compiled files executed synchronously with :func:`runpy.run_path`,
yielding a plain namespace. Either way the result must expose a callable
``create_app`` and is validated straight after loading.
"""

from __future__ import annotations

import collections.abc as cabc
import contextlib
import dataclasses as dc
import importlib.util
import runpy
import sys
import typing as typ
from pathlib import Path

from ssg_pages.errors import RenderEntryNotFound

from .models import AppContext

OutputFormat = typ.Literal["esm", "cjs"]
OUTPUT_FORMATS: tuple[str, ...] = typ.get_args(OutputFormat)
SERVER_EXTENSIONS: dict[str, str] = {"esm": ".py", "cjs": ".pyc"}
FACTORY_NAME = "create_app"

CreateAppFactory = cabc.Callable[..., typ.Any]


@dc.dataclass(slots=True)
class ServerModule:
    """A loaded server bundle exposing a validated ``create_app`` factory."""

    path: Path
    create_app: CreateAppFactory

    def create_context(
        self, *, is_client: bool = False, route_path: str | None = None
    ) -> AppContext:
        """Invoke the factory in server mode and normalise the result."""
        if route_path is None:
            value = self.create_app(is_client)
        else:
            value = self.create_app(is_client, route_path)
        return AppContext.coerce(value, route_path=route_path)


def server_bundle_path(out_dir: Path, entry: Path, output_format: OutputFormat) -> Path:
    """Return where the server pass writes the bundle for ``entry``."""
    return out_dir / f"{entry.stem}{SERVER_EXTENSIONS[output_format]}"


@contextlib.contextmanager
def _search_path(directory: Path | None) -> cabc.Iterator[None]:
    if directory is None:
        yield
        return
    entry = str(directory)
    sys.path.insert(0, entry)
    try:
        yield
    finally:
        with contextlib.suppress(ValueError):
            sys.path.remove(entry)


def load_server_module(
    path: Path,
    output_format: OutputFormat,
    *,
    search_path: Path | None = None,
    init_globals: cabc.Mapping[str, typ.Any] | None = None,
) -> ServerModule:
    """Load the bundle at ``path`` and validate its ``create_app`` export.

    Parameters
    ----------
    path : Path
        Bundle written by the server build pass.
    output_format : {"esm", "cjs"}
        Selects dynamic import (``esm``) or synchronous execution (``cjs``).
    search_path : Path, optional
        Directory prepended to ``sys.path`` while the bundle executes so that
        it can import its sibling modules.
    init_globals : Mapping, optional
        Names seeded into the bundle namespace before its body runs.

    Raises
    ------
    RenderEntryNotFound
        If the bundle does not define a callable ``create_app``.
    """
    seeded = dict(init_globals or {})
    with _search_path(search_path):
        if output_format == "esm":
            namespace = _import_module(path, seeded)
        else:
            namespace = runpy.run_path(
                str(path), init_globals=seeded, run_name=_module_name(path)
            )

    factory = namespace.get(FACTORY_NAME)
    if not callable(factory):
        msg = (
            f"Could not locate render entry point: {path.name} does not export "
            f"a callable '{FACTORY_NAME}'"
        )
        raise RenderEntryNotFound(msg, stage="load")
    return ServerModule(path=path, create_app=factory)


def _module_name(path: Path) -> str:
    return f"_ssg_server_{path.parent.name}_{path.stem}".replace("-", "_")


def _import_module(path: Path, seeded: dict[str, typ.Any]) -> dict[str, typ.Any]:
    name = _module_name(path)
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        msg = f"Could not locate render entry point: cannot import {path}"
        raise RenderEntryNotFound(msg, stage="load")
    module = importlib.util.module_from_spec(spec)
    module.__dict__.update(seeded)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(name, None)
        raise
    return vars(module)


__all__ = [
    "FACTORY_NAME",
    "OUTPUT_FORMATS",
    "SERVER_EXTENSIONS",
    "OutputFormat",
    "ServerModule",
    "load_server_module",
    "server_bundle_path",
]
