"""Browser stand-ins for server modules that touch ``document``/``window``.

Instead of patching interpreter-wide builtins, the stand-ins are handed to the
server module loader, which seeds them into the module's own namespace before
its body executes, and to the renderer through :class:`SSRContext.globals`.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ
from types import SimpleNamespace

from bs4 import BeautifulSoup

DEFAULT_URL = "http://localhost/"
USER_AGENT = "ssg-pages"


@dc.dataclass(slots=True)
class MockDom:
    """A parsed ``document`` plus a minimal ``window`` namespace."""

    document: BeautifulSoup
    window: SimpleNamespace

    @classmethod
    def create(cls, html: str = "", *, url: str = DEFAULT_URL) -> MockDom:
        document = BeautifulSoup(html or "<!DOCTYPE html><html></html>", "html.parser")
        window = SimpleNamespace(
            document=document,
            location=SimpleNamespace(href=url, pathname="/"),
            navigator=SimpleNamespace(user_agent=USER_AGENT),
            local_storage={},
        )
        return cls(document=document, window=window)

    def as_globals(self) -> dict[str, typ.Any]:
        """Return the names seeded into a server module's namespace."""
        return {"document": self.document, "window": self.window}


__all__ = ["MockDom"]
