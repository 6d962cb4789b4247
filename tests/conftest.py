"""Shared fixtures for the ssg_pages test-suite.

``project`` lays out a minimal host project in a temporary directory: a shell
``index.html`` and a ``src/main.py`` server entry exporting ``create_app``.
Tests override either file to model the scenario under test.
"""

from __future__ import annotations

import textwrap
import typing as typ

import pytest

if typ.TYPE_CHECKING:
    import collections.abc as cabc
    from pathlib import Path

DEFAULT_SHELL = """<!DOCTYPE html>
<html>
  <head>
    <title>Demo</title>
    <script type="module" src="/src/main.py"></script>
  </head>
  <body>
    <div id="app"></div>
  </body>
</html>
"""

DEFAULT_ENTRY = """
def create_app(is_client, route_path=None):
    return {"app": lambda ssr_context: "<span>ok</span>"}
"""


@pytest.fixture(autouse=True)
def clean_build_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep mode and pass flags from leaking between tests."""
    for name in ("NODE_ENV", "MODE", "VITE_SSG"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def project(tmp_path: Path) -> cabc.Callable[..., Path]:
    """Return a factory writing a host project under ``tmp_path/site``."""

    def _make(
        *,
        shell: str = DEFAULT_SHELL,
        entry: str = DEFAULT_ENTRY,
        files: dict[str, str] | None = None,
    ) -> Path:
        root = tmp_path / "site"
        (root / "src").mkdir(parents=True, exist_ok=True)
        (root / "index.html").write_text(shell, encoding="utf-8")
        (root / "src" / "main.py").write_text(
            textwrap.dedent(entry).lstrip(), encoding="utf-8"
        )
        for name, content in (files or {}).items():
            target = root / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(content).lstrip(), encoding="utf-8")
        return root

    return _make
