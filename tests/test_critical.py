"""Unit tests for stylesheet inlining."""

from __future__ import annotations

import logging
import typing as typ

from bs4 import BeautifulSoup

from ssg_pages.markup.critical import (
    CriticalCssOptions,
    CriticalCssProcessor,
    get_critical_processor,
)

if typ.TYPE_CHECKING:
    from pathlib import Path

    import pytest

PAGE = (
    "<html><head>"
    '<link rel="stylesheet" href="/assets/site.css">'
    '<link rel="icon" href="/favicon.ico">'
    "</head><body><p>hi</p></body></html>"
)


def _out_dir(tmp_path: Path) -> Path:
    assets = tmp_path / "assets"
    assets.mkdir()
    (assets / "site.css").write_text("p{color:red}", encoding="utf-8")
    return tmp_path


def test_media_strategy_inlines_and_defers(tmp_path: Path) -> None:
    processor = CriticalCssProcessor(_out_dir(tmp_path), CriticalCssOptions())
    soup = BeautifulSoup(processor.process(PAGE), "html.parser")
    assert soup.head.style.string == "p{color:red}"
    deferred = soup.head.find("link", rel="stylesheet")
    assert deferred["media"] == "print"
    assert deferred["onload"] == "this.media='all'"
    fallback = soup.head.noscript.link
    assert fallback["href"] == "/assets/site.css"
    assert "media" not in fallback.attrs
    assert soup.head.find("link", rel="icon") is not None


def test_swap_strategy_turns_link_into_preload(tmp_path: Path) -> None:
    options = CriticalCssOptions(preload="swap")
    processor = CriticalCssProcessor(_out_dir(tmp_path), options)
    soup = BeautifulSoup(processor.process(PAGE), "html.parser")
    link = soup.head.find("link", href="/assets/site.css")
    assert link["rel"] == ["preload"]
    assert link["as"] == "style"


def test_none_strategy_drops_link(tmp_path: Path) -> None:
    options = CriticalCssOptions(preload="none")
    html = CriticalCssProcessor(_out_dir(tmp_path), options).process(PAGE)
    assert "/assets/site.css" not in html
    assert "<style>p{color:red}</style>" in html


def test_base_path_is_stripped(tmp_path: Path) -> None:
    options = CriticalCssOptions(base="/docs/")
    page = PAGE.replace("/assets/site.css", "/docs/assets/site.css")
    html = CriticalCssProcessor(_out_dir(tmp_path), options).process(page)
    assert "<style>p{color:red}</style>" in html


def test_oversized_and_missing_stylesheets_are_left_alone(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
) -> None:
    out_dir = _out_dir(tmp_path)
    page = PAGE.replace("</head>", '<link rel="stylesheet" href="/gone.css"></head>')
    options = CriticalCssOptions(max_inline_bytes=4)
    with caplog.at_level(logging.WARNING, logger="ssg_pages.markup.critical"):
        html = CriticalCssProcessor(out_dir, options).process(page)
    assert html == page
    messages = " ".join(record.getMessage() for record in caplog.records)
    assert "exceeds the inline limit" in messages
    assert "/gone.css" in messages


def test_remote_stylesheets_are_ignored(tmp_path: Path) -> None:
    page = '<link rel="stylesheet" href="https://cdn.test/site.css">'
    assert CriticalCssProcessor(tmp_path, CriticalCssOptions()).process(page) == page


def test_processor_factory_respects_disabled_options(tmp_path: Path) -> None:
    assert get_critical_processor(tmp_path, None) is None
    assert get_critical_processor(tmp_path, False) is None
    processor = get_critical_processor(tmp_path, CriticalCssOptions())
    assert isinstance(processor, CriticalCssProcessor)
    assert processor.out_dir == tmp_path
