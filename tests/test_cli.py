"""Tests for the ``ssg-pages`` command-line interface."""

from __future__ import annotations

import typing as typ
from pathlib import Path

import pytest

from ssg_pages import cli
from ssg_pages.errors import RenderError


def test_build_forwards_options(mocker: typ.Any, capsys: pytest.CaptureFixture[str]) -> None:
    run_build = mocker.patch.object(
        cli, "run_build", return_value=[Path.cwd() / "dist" / "index.html"]
    )
    code = cli.main(
        ["build", "--script", "async defer", "--mock", "-c", "site/ssg.yaml", "-b", "/docs/"]
    )
    assert code == 0
    run_build.assert_called_once_with(
        {"script": "async defer", "mock": True, "base": "/docs/"},
        {"config_file": Path("site/ssg.yaml")},
    )
    assert capsys.readouterr().out.strip() == f"wrote {Path('dist') / 'index.html'}"


def test_unset_flags_are_passed_as_none(mocker: typ.Any) -> None:
    run_build = mocker.patch.object(cli, "run_build", return_value=[])
    assert cli.main(["build"]) == 0
    run_build.assert_called_once_with(
        {"script": None, "mock": None, "base": None}, {"config_file": None}
    )


@pytest.mark.parametrize(
    "tokens",
    [["build", "--script", "eager"], ["build", "--unknown"]],
)
def test_invalid_arguments_exit_with_status_one(
    tokens: list[str], mocker: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    run_build = mocker.patch.object(cli, "run_build")
    assert cli.main(tokens) == 1
    run_build.assert_not_called()
    err = capsys.readouterr().err
    assert "[ssg-pages] An internal error occurred." in err


def test_build_errors_are_reported(mocker: typ.Any, capsys: pytest.CaptureFixture[str]) -> None:
    mocker.patch.object(cli, "run_build", side_effect=RenderError("index", "Traceback..."))
    assert cli.main(["build"]) == 1
    err = capsys.readouterr().err
    assert "Error on page: index" in err
    assert err.rstrip().endswith("[ssg-pages] An internal error occurred.")


def test_help_exits_cleanly(
    mocker: typ.Any, capsys: pytest.CaptureFixture[str]
) -> None:
    run_build = mocker.patch.object(cli, "run_build")
    assert cli.main(["build", "--help"]) == 0
    run_build.assert_not_called()
    assert "--script" in capsys.readouterr().out
