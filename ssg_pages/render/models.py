"""Dataclasses exchanged between the build pipeline and the server module."""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import json
import typing as typ

from ssg_pages.errors import RenderEntryNotFound

StateSerializer = cabc.Callable[[typ.Any], str]


def default_state_serializer(state: typ.Any) -> str:
    """Serialise initial state as JSON that is safe inside a ``<script>`` tag."""
    return json.dumps(state, separators=(",", ":")).replace("<", "\\u003c")


@dc.dataclass(slots=True)
class SSRContext:
    """Side channel passed to the renderer.

    Attributes
    ----------
    modules : set[str]
        Identifiers of the modules/templates touched while rendering.
    state : dict[str, Any]
        Values made available to template based applications.
    globals : dict[str, Any]
        Execution globals (``document``/``window``) when DOM mocking is on.
    """

    modules: set[str] = dc.field(default_factory=set)
    state: dict[str, typ.Any] = dc.field(default_factory=dict)
    globals: dict[str, typ.Any] = dc.field(default_factory=dict)


@dc.dataclass(slots=True)
class AppContext:
    """What ``create_app`` hands back to the build pipeline."""

    app: typ.Any
    head: typ.Any = None
    initial_state: typ.Any = None
    state_serializer: StateSerializer | None = None
    on_rendered: cabc.Callable[[], typ.Any] | None = None
    route_path: str | None = None
    is_client: bool = False

    @classmethod
    def coerce(cls, value: typ.Any, *, route_path: str | None = None) -> AppContext:
        """Normalise the return value of ``create_app`` into an ``AppContext``."""
        if isinstance(value, AppContext):
            return value
        if isinstance(value, cabc.Mapping):
            if "app" not in value:
                msg = "create_app() returned a mapping without an 'app' entry"
                raise RenderEntryNotFound(msg, stage="load")
            fields = {field.name for field in dc.fields(cls)}
            payload = {key: item for key, item in value.items() if key in fields}
            payload.setdefault("route_path", route_path)
            return cls(**payload)
        msg = (
            "create_app() must return an AppContext or a mapping with an 'app' "
            f"entry, got {type(value).__name__}"
        )
        raise RenderEntryNotFound(msg, stage="load")

    def state_script(self) -> str:
        """Return the ``<script>`` tag restoring the initial state, if any."""
        if self.initial_state is None:
            return ""
        serializer = self.state_serializer or default_state_serializer
        return f"<script>window.__INITIAL_STATE__={serializer(self.initial_state)}</script>"


__all__ = [
    "AppContext",
    "SSRContext",
    "StateSerializer",
    "default_state_serializer",
]
