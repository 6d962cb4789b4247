"""Server module loading and rendering for the pre-render pass."""

from .mock_dom import MockDom
from .models import AppContext, SSRContext
from .renderer import Renderer, TemplateApp, render_to_string
from .server_module import OutputFormat, ServerModule, load_server_module

__all__ = [
    "AppContext",
    "MockDom",
    "OutputFormat",
    "Renderer",
    "SSRContext",
    "ServerModule",
    "TemplateApp",
    "load_server_module",
    "render_to_string",
]
