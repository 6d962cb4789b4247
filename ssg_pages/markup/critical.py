"""Inline local stylesheets so the first paint does not wait on CSS requests.

The processor reads each ``<link rel="stylesheet">`` pointing at a file in the
build output, inlines its rules as a ``<style>`` block and demotes the link to
a non-blocking load according to the configured ``preload`` strategy.
"""

from __future__ import annotations

import dataclasses as dc
import logging
import typing as typ
from pathlib import Path
from urllib.parse import urlsplit

from .formatting import HTML5_FORMATTER, parse_document

if typ.TYPE_CHECKING:
    from bs4 import BeautifulSoup

PreloadStrategy = typ.Literal["media", "swap", "none"]
PRELOAD_CHOICES: tuple[str, ...] = typ.get_args(PreloadStrategy)

logger = logging.getLogger(__name__)


@dc.dataclass(slots=True, frozen=True)
class CriticalCssOptions:
    """Settings for stylesheet inlining.

    Attributes
    ----------
    preload : {"media", "swap", "none"}
        ``media`` loads the original stylesheet with ``media="print"`` and
        swaps it to ``all`` once loaded (with a ``<noscript>`` fallback);
        ``swap`` turns the link into ``rel="preload"``; ``none`` drops it.
    max_inline_bytes : int | None
        Stylesheets larger than this are left as plain links.
    base : str
        Public base path stripped from ``href`` values before resolving them
        against the output directory.
    """

    preload: PreloadStrategy = "media"
    max_inline_bytes: int | None = None
    base: str = "/"


class CriticalCssProcessor:
    """Inline stylesheets from ``out_dir`` into rendered pages."""

    def __init__(self, out_dir: Path, options: CriticalCssOptions) -> None:
        self.out_dir = out_dir
        self.options = options

    def process(self, html: str) -> str:
        """Return ``html`` with local stylesheets inlined."""
        soup = parse_document(html)
        changed = False
        for link in soup.find_all("link"):
            rel = link.get("rel") or []
            if "stylesheet" not in rel:
                continue
            path = self._resolve(link.get("href"))
            if path is None:
                continue
            css = path.read_text(encoding="utf-8")
            size = len(css.encode("utf-8"))
            limit = self.options.max_inline_bytes
            if limit is not None and size > limit:
                logger.warning(
                    "Skipping %s: %d bytes exceeds the inline limit", path.name, size
                )
                continue
            style = soup.new_tag("style")
            style.string = css
            link.insert_before(style)
            self._demote(soup, link)
            changed = True
        if not changed:
            return html
        return soup.decode(formatter=HTML5_FORMATTER)

    def _resolve(self, href: str | None) -> Path | None:
        if not href:
            return None
        parts = urlsplit(href)
        if parts.scheme or parts.netloc:
            return None
        relative = parts.path
        base = self.options.base
        if base and base != "/" and relative.startswith(base):
            relative = relative[len(base) :]
        candidate = self.out_dir / relative.lstrip("/")
        if not candidate.is_file():
            logger.warning("Stylesheet %s not found under %s", href, self.out_dir)
            return None
        return candidate

    def _demote(self, soup: BeautifulSoup, link: typ.Any) -> None:
        match self.options.preload:
            case "media":
                fallback = soup.new_tag("noscript")
                fallback.append(soup.new_tag("link", attrs=dict(link.attrs)))
                link["media"] = "print"
                link["onload"] = "this.media='all'"
                link.insert_after(fallback)
            case "swap":
                link["rel"] = ["preload"]
                link["as"] = "style"
                link["onload"] = "this.rel='stylesheet'"
            case _:
                link.decompose()


def get_critical_processor(
    out_dir: Path, options: CriticalCssOptions | typ.Literal[False] | None
) -> CriticalCssProcessor | None:
    """Return a processor bound to ``out_dir`` or ``None`` when disabled."""
    if options is False or options is None:
        return None
    return CriticalCssProcessor(out_dir, options)


__all__ = [
    "PRELOAD_CHOICES",
    "CriticalCssOptions",
    "CriticalCssProcessor",
    "PreloadStrategy",
    "get_critical_processor",
]
