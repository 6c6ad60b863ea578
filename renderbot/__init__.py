"""Renderbot: headless page rendering for LLM agents, packaged with an MCP server."""

from .browser import Renderer, create_renderer
from .config import FormField, RenderConfig, WaitPolicy
from .errors import RenderError

__all__ = [
    "FormField",
    "RenderConfig",
    "RenderError",
    "Renderer",
    "WaitPolicy",
    "create_renderer",
]
