"""Pre-render client applications into static HTML pages.

This package exposes the ``ssg-pages`` CLI and the programmatic ``build``
entry point used by host projects to render their shell documents ahead of
time.

Exports
-------
- ``app``: Cyclopts application carrying the ``build`` command.
- ``main``: Convenience function that invokes the Cyclopts app.
- ``build``: Run a build from Python with caller supplied options.

Examples
--------
>>> from ssg_pages import main
>>> main(["build"])  # doctest: +SKIP
0
>>> from ssg_pages import app
>>> callable(app)
True
"""

from __future__ import annotations

from .pipeline import build
from .cli import app, main

__all__ = ["app", "build", "main"]
