"""Load the host build configuration YAML into typed dataclasses."""

from __future__ import annotations

import collections.abc as cabc
import typing as typ
from pathlib import Path

from ruamel.yaml import YAML

from .helpers import _optional_str
from .models import DEFAULT_OUT_DIR, ConfigurationError, HostConfig

DEFAULT_CONFIG_NAMES = ("ssg.yaml", "ssg.yml")


def find_config_file(cwd: Path) -> Path | None:
    """Return the first default config file present in ``cwd``."""
    for name in DEFAULT_CONFIG_NAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    return None


def load_host_config(path: Path | None, *, cwd: Path | None = None) -> HostConfig:
    """Load the host build configuration.

    Parameters
    ----------
    path : Path or None
        Explicit configuration file (``--config``). When ``None`` the default
        ``ssg.yaml``/``ssg.yml`` in ``cwd`` is used if present; otherwise an
        empty configuration rooted at ``cwd`` is returned.
    cwd : Path, optional
        Working directory used for defaults and relative roots. Defaults to
        :meth:`Path.cwd`.

    Returns
    -------
    HostConfig
        Parsed configuration with ``root`` resolved to an absolute path.

    Raises
    ------
    FileNotFoundError
        If an explicit ``path`` does not exist.
    ConfigurationError
        If the YAML structure is not a mapping or a section has the wrong shape.
    """
    base_dir = (cwd or Path.cwd()).resolve()
    if path is None:
        path = find_config_file(base_dir)
        if path is None:
            return HostConfig(path=None, root=base_dir)
    elif not path.exists():
        msg = f"Configuration file '{path}' not found."
        raise FileNotFoundError(msg)

    loader = YAML(typ="safe")
    loader.version = (1, 2)
    with path.open("r", encoding="utf-8") as handle:
        loaded = loader.load(handle) or {}
    if not isinstance(loaded, dict):
        msg = "Top-level YAML structure must be a mapping."
        raise ConfigurationError(msg)
    raw: dict[str, typ.Any] = dict(loaded)

    config_dir = path.resolve().parent
    root = Path(raw.get("root") or ".")
    if not root.is_absolute():
        root = config_dir / root

    build = _section(raw, "build")
    resolve = _section(raw, "resolve")
    ssg_options = _section(raw, "ssg_options") or _section(raw, "ssgOptions")

    command = build.get("command") or []
    if isinstance(command, str):
        command = command.split()
    alias = resolve.get("alias") or {}
    if not isinstance(alias, cabc.Mapping):
        msg = "'resolve.alias' must be a mapping of prefixes to paths."
        raise ConfigurationError(msg)
    extensions = resolve.get("extensions") or [".py"]

    return HostConfig(
        path=path,
        root=root.resolve(),
        mode=_optional_str(raw.get("mode")),
        base=_optional_str(raw.get("base")),
        out_dir=_optional_str(build.get("out_dir") or build.get("outDir"))
        or DEFAULT_OUT_DIR,
        build_command=[str(part) for part in command],
        alias={str(key): str(value) for key, value in alias.items()},
        extensions=[str(ext) for ext in extensions],
        public_dir=_optional_str(raw.get("public_dir", "public")),
        ssg_options=dict(ssg_options),
    )


def _section(raw: cabc.Mapping[str, typ.Any], key: str) -> dict[str, typ.Any]:
    value = raw.get(key) or {}
    if not isinstance(value, cabc.Mapping):
        msg = f"'{key}' must be a mapping."
        raise ConfigurationError(msg)
    return dict(value)


__all__ = ["DEFAULT_CONFIG_NAMES", "find_config_file", "load_host_config"]
