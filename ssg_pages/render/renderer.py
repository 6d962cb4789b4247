"""Turn an application instance into a markup string.

Applications are duck-typed: anything with a ``render(ssr_context)`` method,
a :class:`jinja2.Template`, or a plain callable taking the SSR context.
:class:`TemplateApp` is the bundled Jinja2 flavour.
"""

from __future__ import annotations

import typing as typ
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape

if typ.TYPE_CHECKING:
    from .models import SSRContext


class Renderer(typ.Protocol):
    def __call__(self, app: typ.Any, ssr_context: SSRContext) -> str: ...


def render_to_string(app: typ.Any, ssr_context: SSRContext) -> str:
    """Render ``app`` using the SSR context as side channel.

    Raises
    ------
    TypeError
        If ``app`` is not renderable or rendering yields a non-string.
    """
    if isinstance(app, Template):
        ssr_context.modules.add(app.name or "<string>")
        markup = app.render(**ssr_context.state)
    elif hasattr(app, "render"):
        markup = app.render(ssr_context)
    elif callable(app):
        markup = app(ssr_context)
    else:
        msg = f"Cannot render application of type {type(app).__name__}"
        raise TypeError(msg)
    if not isinstance(markup, str):
        msg = f"Renderer produced {type(markup).__name__}, expected str"
        raise TypeError(msg)
    return markup


class TemplateApp:
    """Server-renderable application backed by a Jinja2 template.

    Parameters
    ----------
    template : str
        Template name, looked up in ``templates_dir``; or template source
        when ``templates_dir`` is ``None``.
    templates_dir : Path, optional
        Directory holding the application's templates.
    context : dict, optional
        Values passed to the template on every render, merged under the SSR
        context ``state``.
    """

    def __init__(
        self,
        template: str,
        *,
        templates_dir: Path | None = None,
        context: dict[str, typ.Any] | None = None,
    ) -> None:
        self.context = dict(context or {})
        if templates_dir is None:
            self.env = Environment(
                autoescape=True, trim_blocks=True, lstrip_blocks=True
            )
            self.template = self.env.from_string(template)
            self.name = "<string>"
        else:
            self.env = Environment(
                loader=FileSystemLoader(str(templates_dir)),
                autoescape=select_autoescape(["html", "xml", "jinja"]),
                trim_blocks=True,
                lstrip_blocks=True,
            )
            self.template = self.env.get_template(template)
            self.name = template

    def render(self, ssr_context: SSRContext) -> str:
        ssr_context.modules.add(self.name)
        values = {**self.context, **ssr_context.state}
        return self.template.render(**values)


__all__ = ["Renderer", "TemplateApp", "render_to_string"]
