"""MCP surface for Renderbot."""

from .server import configure_renderer, main, mcp, render_page

__all__ = ["configure_renderer", "main", "mcp", "render_page"]
