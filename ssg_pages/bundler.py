"""Drive the client and server build passes.

The client pass produces the static site: it either runs the configured
front-end build command (``npx vite build`` or similar) or, when no command is
configured, copies the shell template and the ``public/`` directory into the
output folder. The server pass emits a single-file Python bundle of the server
entry into a private directory, ready for :func:`load_server_module`.
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import logging
import os
import py_compile
import shutil
import subprocess
import typing as typ
from pathlib import Path

from .config import HostConfig, load_host_config
from .render.server_module import OutputFormat, server_bundle_path

logger = logging.getLogger(__name__)

Resolver = cabc.Callable[[str, Path], Path | None]


@dc.dataclass(slots=True)
class ResolvedConfig:
    """Host configuration resolved for one command/mode combination."""

    host: HostConfig
    command: str
    mode: str
    env_mode: str

    @property
    def root(self) -> Path:
        return self.host.root

    @property
    def out_dir(self) -> str:
        """The configured output directory, as written in the config."""
        return self.host.out_dir

    @property
    def ssg_options(self) -> dict[str, typ.Any]:
        return self.host.ssg_options

    def out_path(self) -> Path:
        """Return the absolute output directory."""
        out = Path(self.out_dir)
        return out if out.is_absolute() else self.root / out

    def create_resolver(self) -> Resolver:
        """Return a resolver applying aliases, root lookup, and extensions.

        The resolver maps ``(id, importer_dir)`` to an existing file or
        ``None``. Alias prefixes are tried longest first; ``/``-prefixed ids
        are taken relative to the project root; relative ids relative to
        ``importer_dir``. When the file does not exist as written, each
        configured extension is tried as a replacement suffix, then as an
        appended suffix.
        """
        aliases = sorted(self.host.alias.items(), key=lambda item: -len(item[0]))
        extensions = list(self.host.extensions)
        root = self.root

        def _resolve(source: str, importer_dir: Path) -> Path | None:
            target = source
            for prefix, replacement in aliases:
                if source == prefix or source.startswith(prefix):
                    target = replacement + source[len(prefix) :]
                    break
            if target.startswith("/"):
                candidate = root / target.lstrip("/")
            else:
                candidate = Path(target)
                if not candidate.is_absolute():
                    candidate = importer_dir / candidate
            for option in _candidates(candidate, extensions):
                if option.is_file():
                    return option.resolve()
            return None

        return _resolve


def _candidates(path: Path, extensions: list[str]) -> cabc.Iterator[Path]:
    yield path
    for ext in extensions:
        if path.suffix and path.suffix != ext:
            yield path.with_suffix(ext)
        yield path.with_name(path.name + ext)


def resolve_config(
    overrides: cabc.Mapping[str, typ.Any] | None,
    command: str,
    mode: str,
    env_mode: str,
    *,
    cwd: Path | None = None,
) -> ResolvedConfig:
    """Load the host configuration named in ``overrides`` and resolve it.

    ``overrides`` may carry ``config_file`` (path to the YAML file),
    ``root``, ``out_dir`` and ``base``, which take precedence over the file.
    """
    overrides = dict(overrides or {})
    config_file = overrides.get("config_file")
    host = load_host_config(Path(config_file) if config_file else None, cwd=cwd)
    if overrides.get("root"):
        host.root = Path(overrides["root"]).resolve()
    if overrides.get("out_dir"):
        host.out_dir = str(overrides["out_dir"])
    if overrides.get("base"):
        host.base = str(overrides["base"])
    return ResolvedConfig(host=host, command=command, mode=mode, env_mode=env_mode)


@dc.dataclass(slots=True, frozen=True)
class BuildSpec:
    """A single bundler invocation.

    A spec without ``ssr`` describes the client pass for ``name``/``template``;
    a spec with ``ssr`` describes the server pass for that entry file.
    """

    out_dir: Path
    mode: str
    name: str | None = None
    template: Path | None = None
    base: str | None = None
    ssr: Path | None = None
    format: OutputFormat = "esm"
    minify: bool = True
    css_code_split: bool = True


@dc.dataclass(slots=True)
class BuildArtifacts:
    """Files produced by a bundler invocation."""

    out_dir: Path
    files: list[Path] = dc.field(default_factory=list)


class Bundler(typ.Protocol):
    def build(self, spec: BuildSpec) -> BuildArtifacts: ...


class ProjectBundler:
    """Default bundler driven by the host configuration."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config

    def build(self, spec: BuildSpec) -> BuildArtifacts:
        if spec.ssr is not None:
            return self._build_server(spec, spec.ssr)
        return self._build_client(spec)

    def _build_client(self, spec: BuildSpec) -> BuildArtifacts:
        command = self.config.host.build_command
        if command:
            args = [*command, "--outDir", str(spec.out_dir), "--mode", spec.mode]
            if spec.base:
                args += ["--base", spec.base]
            subprocess.run(  # noqa: S603
                args, check=True, cwd=self.config.root, env=os.environ.copy(), text=True
            )
            return BuildArtifacts(
                out_dir=spec.out_dir,
                files=sorted(path for path in spec.out_dir.rglob("*") if path.is_file()),
            )
        return self._copy_static(spec)

    def _copy_static(self, spec: BuildSpec) -> BuildArtifacts:
        """Stand in for a front-end build when no command is configured."""
        if spec.template is None or spec.name is None:
            msg = "Client build requires an entry name and a shell template."
            raise ValueError(msg)
        spec.out_dir.mkdir(parents=True, exist_ok=True)
        files: list[Path] = []
        public_name = self.config.host.public_dir
        public = self.config.root / public_name if public_name else None
        if public is not None and public.is_dir():
            shutil.copytree(public, spec.out_dir, dirs_exist_ok=True)
            files.extend(path for path in spec.out_dir.rglob("*") if path.is_file())
        target = spec.out_dir / f"{spec.name}.html"
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(spec.template, target)
        files.append(target)
        logger.debug("Copied shell %s to %s", spec.template, target)
        return BuildArtifacts(out_dir=spec.out_dir, files=files)

    def _build_server(self, spec: BuildSpec, entry: Path) -> BuildArtifacts:
        spec.out_dir.mkdir(parents=True, exist_ok=True)
        bundle = server_bundle_path(spec.out_dir, entry, spec.format)
        if spec.format == "esm":
            shutil.copyfile(entry, bundle)
        else:
            py_compile.compile(
                str(entry),
                cfile=str(bundle),
                dfile=str(entry),
                doraise=True,
                optimize=2 if spec.minify else 0,
            )
        return BuildArtifacts(out_dir=spec.out_dir, files=[bundle])


__all__ = [
    "BuildArtifacts",
    "BuildSpec",
    "Bundler",
    "ProjectBundler",
    "ResolvedConfig",
    "Resolver",
    "resolve_config",
]
