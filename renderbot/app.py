"""ASGI application for serving Renderbot's MCP tools over HTTP.

Renderer defaults come from the environment (and ``.env``) at import time,
since an ASGI host imports this module instead of calling ``main``.
"""

from __future__ import annotations

from dotenv import load_dotenv
from fastmcp import FastMCP

from renderbot.config import env_browser, env_headless
from renderbot.mcp.server import configure_renderer, mcp

load_dotenv()
configure_renderer(headless=env_headless(), browser=env_browser())

app = mcp.http_app()


def get_app() -> FastMCP:
    return mcp
