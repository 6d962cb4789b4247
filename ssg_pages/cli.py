"""Cyclopts CLI entrypoint for pre-rendering a client application.

The ``ssg-pages`` console script defined here exposes a single ``build``
command. It runs the client build, the server build, renders the application
and writes one static HTML page per entry into the configured output folder.

Examples
--------
Build with deferred module scripts and mocked browser globals:

>>> from ssg_pages.cli import main
>>> main(["build", "--script", "defer", "--mock"])  # doctest: +SKIP
0

Use an explicit host configuration file and base path:

>>> main(["build", "-c", "site/ssg.yaml", "-b", "/docs/"])  # doctest: +SKIP
0
"""

from __future__ import annotations

import collections.abc as cabc
import logging
import subprocess
import sys
import typing as typ
from pathlib import Path

from cyclopts import App, Parameter
from cyclopts.exceptions import CycloptsError

from .config import ScriptMode
from .errors import LOG_PREFIX, SSGError
from .pipeline import build as run_build

INTERNAL_ERROR = "An internal error occurred."

app = App(name="ssg-pages", help="Pre-render a client application to static HTML.")


def _format_path(path: Path) -> str:
    """Return a cwd-relative path when possible, otherwise the absolute path."""
    if path.is_absolute():
        try:
            return str(path.relative_to(Path.cwd()))
        except ValueError:  # pragma: no cover - fallback for different roots
            return str(path)
    return str(path)


@app.command(help="Build SSG")
def build(
    *,
    script: typ.Annotated[
        ScriptMode | None, Parameter(help="Rewrites script loading timing")
    ] = None,
    mock: typ.Annotated[
        bool | None,
        Parameter(help="Mock browser globals (window, document, etc.) for SSG"),
    ] = None,
    config: typ.Annotated[
        Path | None,
        Parameter(name=["--config", "-c"], help="The host build config file to use"),
    ] = None,
    base: typ.Annotated[
        str | None, Parameter(name=["--base", "-b"], help="The base path to render")
    ] = None,
) -> None:
    """Run a complete pre-render build.

    Parameters
    ----------
    script : {"sync", "async", "defer", "async defer"}, optional
        Loading attribute added to module script tags.
    mock : bool, optional
        Seed ``document``/``window`` stand-ins into the server module.
    config : Path, optional
        Host configuration file; defaults to ``ssg.yaml`` in the working
        directory.
    base : str, optional
        Public base path for the client build.

    Returns
    -------
    None
        Pages are written to disk and their paths printed.
    """
    written = run_build(
        {"script": script, "mock": mock, "base": base},
        {"config_file": config},
    )
    for path in written:
        print(f"wrote {_format_path(path)}")


def _fail(message: str) -> int:
    print(f"\n{LOG_PREFIX} {message}", file=sys.stderr)
    print(f"\n{LOG_PREFIX} {INTERNAL_ERROR}", file=sys.stderr)
    return 1


def main(tokens: cabc.Sequence[str] | None = None) -> int:
    """Invoke the Cyclopts application behind the ``ssg-pages`` console command.

    Parameters
    ----------
    tokens : Sequence[str], optional
        Command-line arguments; defaults to ``sys.argv[1:]``.

    Returns
    -------
    int
        ``0`` on success (including ``--help``), ``1`` when argument parsing,
        validation, or the build fails.
    """
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    try:
        app(tokens, print_error=False, exit_on_error=False)
    except CycloptsError as exc:
        return _fail(str(exc).strip())
    except (SSGError, OSError, subprocess.CalledProcessError) as exc:
        return _fail(str(exc))
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation helper
    raise SystemExit(main())
