"""FastMCP server that exposes Renderbot's single render call."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from threading import Lock
from typing import Any, Dict, Iterator, List, Optional

from dotenv import load_dotenv
from fastmcp import Context, FastMCP
from playwright.sync_api import Error, TimeoutError

from renderbot.browser.core import Renderer, create_renderer
from renderbot.config import (
    DEFAULT_PROFILE,
    RenderConfig,
    env_browser,
    env_headless,
    env_truncate_after,
    parse_fields,
)
from renderbot.errors import RenderError

mcp = FastMCP(name="renderbot")

_renderer_config: Dict[str, Any] = {"headless": True, "browser": "firefox"}
_renderer: Optional[Renderer] = None
_renderer_lock = Lock()
# Firefox refuses to open one profile twice; runs on the same profile queue up.
# Each entry is [lock, holders]; it is dropped once no run holds or awaits it.
_profile_locks: Dict[str, List[Any]] = {}
_profile_registry_lock = Lock()


def configure_renderer(
    *,
    headless: bool = True,
    browser: str = "firefox",
) -> None:
    """Set the Renderer defaults used by subsequent tool calls."""
    global _renderer_config, _renderer
    with _renderer_lock:
        _renderer_config = {"headless": headless, "browser": browser}
        _renderer = None


def _get_renderer() -> Renderer:
    global _renderer
    with _renderer_lock:
        if _renderer is None:
            _renderer = create_renderer(
                headless=_renderer_config["headless"],
                browser=_renderer_config["browser"],
            )
        return _renderer


@contextmanager
def _profile_lock(profile: str) -> Iterator[None]:
    with _profile_registry_lock:
        entry = _profile_locks.setdefault(profile, [Lock(), 0])
        entry[1] += 1
    try:
        with entry[0]:
            yield
    finally:
        with _profile_registry_lock:
            entry[1] -= 1
            if entry[1] == 0:
                del _profile_locks[profile]


def _render(config: RenderConfig) -> Dict[str, Any]:
    renderer = _get_renderer()
    with _profile_lock(config.profile):
        output = renderer.render(config)
    return {"url": config.target_url, "profile": config.profile, "output": output}


def _call_with_errors(operation: str, build: Any) -> Dict[str, Any]:
    try:
        config = build()
        return _render(config)
    except TimeoutError as exc:
        return {"error": "timeout", "operation": operation, "message": str(exc)}
    except Error as exc:
        return {"error": "playwright", "operation": operation, "message": str(exc)}
    except RenderError as exc:
        return {"error": type(exc).__name__, "operation": operation, "message": str(exc)}
    except (TypeError, ValueError) as exc:
        return {"error": "invalid_arguments", "operation": operation, "message": str(exc)}
    except Exception as exc:
        return {"error": "unexpected", "operation": operation, "message": str(exc)}


async def _run_render(operation: str, build: Any) -> Dict[str, Any]:
    return await asyncio.to_thread(_call_with_errors, operation, build)


@mcp.tool
async def render_page(
    url: str,
    *,
    profile: str = DEFAULT_PROFILE,
    form_id: Optional[str] = None,
    fields: Optional[Dict[str, str] | List[Dict[str, str]]] = None,
    after_submit_url: Optional[str] = None,
    script: Optional[str] = None,
    screenshot_path: Optional[str] = None,
    truncate_after: Optional[int] = None,
    raw: bool = False,
    ctx: Optional[Context] = None,
) -> Dict[str, Any]:
    """Render ``url`` in a headless browser and return its text and console output.

    Optionally fills ``fields`` (name/value pairs) inside the form with id
    ``form_id`` and submits it, runs ``script`` in the page, saves a
    screenshot, then loads ``after_submit_url`` before extracting content.
    Phoenix LiveView pages are detected and waited on automatically.
    Console output is only kept for the last full page load.
    """

    def build() -> RenderConfig:
        return RenderConfig(
            url=url,
            profile=profile,
            form_id=form_id,
            fields=parse_fields(fields),
            after_submit_url=after_submit_url,
            script=script,
            screenshot_path=screenshot_path,
            truncate_after=truncate_after or env_truncate_after(),
            raw=raw,
        )

    if ctx is not None:
        await ctx.info(f"Rendering {url} with profile {profile!r}")
    return await _run_render("render_page", build)


def main() -> None:
    """Run the Renderbot MCP server using environment defaults."""
    load_dotenv()
    configure_renderer(headless=env_headless(), browser=env_browser())
    mcp.run()


__all__ = [
    "mcp",
    "configure_renderer",
    "render_page",
    "main",
]
