"""Exception hierarchy shared by the ssg_pages build pipeline."""

from __future__ import annotations

LOG_PREFIX = "[ssg-pages]"


class SSGError(RuntimeError):
    """Base class for every error raised deliberately by ssg_pages."""


class ConfigurationError(SSGError, ValueError):
    """Raised when CLI arguments or the host configuration are invalid."""


class BuildError(SSGError):
    """Raised when a build step cannot complete.

    Parameters
    ----------
    message : str
        Human readable description of the failure.
    stage : str, optional
        Pipeline stage that failed (``"client"``, ``"server"``, ``"load"``,
        ``"render"``...).
    """

    def __init__(self, message: str, *, stage: str | None = None) -> None:
        super().__init__(message)
        self.stage = stage


class MissingEntryError(BuildError, FileNotFoundError):
    """Raised when the shell HTML of an entry does not exist."""


class RenderEntryNotFound(BuildError):
    """Raised when the server module does not expose a usable ``create_app``."""


class InjectionTargetNotFound(SSGError, LookupError):
    """Raised when no element carries the configured container id."""

    def __init__(self, container_id: str) -> None:
        super().__init__(
            f'Could not find a tag with id="{container_id}" to replace it '
            "with server-side rendered HTML"
        )
        self.container_id = container_id


class RenderError(BuildError):
    """Raised when rendering, splicing, or formatting a page fails."""

    def __init__(self, page: str, details: str) -> None:
        super().__init__(
            f"{LOG_PREFIX} Error on page: {page}\n{details}", stage="render"
        )
        self.page = page


__all__ = [
    "LOG_PREFIX",
    "BuildError",
    "ConfigurationError",
    "InjectionTargetNotFound",
    "MissingEntryError",
    "RenderEntryNotFound",
    "RenderError",
    "SSGError",
]
