"""MCP tool error mapping and argument handling."""

from __future__ import annotations

import asyncio

import pytest
from playwright.sync_api import Error

from renderbot.config import FormField, RenderConfig
from renderbot.errors import FormError
from renderbot.mcp import server


class _Renderer:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.configs = []

    def render(self, config):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def renderer(monkeypatch):
    fake = _Renderer(result="text")
    monkeypatch.setattr(server, "_get_renderer", lambda: fake)
    return fake


def test_successful_render_returns_output(renderer):
    result = server._call_with_errors("render_page", lambda: RenderConfig(url="example.test"))
    assert result == {"url": "http://example.test", "profile": "default", "output": "text"}


@pytest.mark.parametrize(
    "error, kind",
    [
        (FormError("could not find input email"), "FormError"),
        (Error("browser crashed"), "playwright"),
        (RuntimeError("boom"), "unexpected"),
    ],
)
def test_render_errors_become_payloads(renderer, error, kind):
    renderer.error = error
    result = server._call_with_errors("render_page", lambda: RenderConfig(url="example.test"))
    assert result["error"] == kind
    assert result["operation"] == "render_page"
    assert str(error) in result["message"]


def test_invalid_arguments_are_reported(renderer):
    result = server._call_with_errors("render_page", lambda: RenderConfig(url=""))
    assert result["error"] == "invalid_arguments"
    assert renderer.configs == []


def test_render_page_tool_builds_config(renderer, monkeypatch):
    monkeypatch.delenv("RENDERBOT_TRUNCATE_AFTER", raising=False)
    tool = getattr(server.render_page, "fn", server.render_page)
    result = asyncio.run(
        tool(
            "localhost:4000/login",
            form_id="login",
            fields={"email": "a@b.test"},
            raw=True,
        )
    )
    assert result["output"] == "text"
    config = renderer.configs[0]
    assert config.form_id == "login"
    assert config.fields == (FormField("email", "a@b.test"),)
    assert config.truncate_after == 100000
    assert config.raw


def test_asgi_app_wraps_the_same_server(monkeypatch):
    monkeypatch.setenv("RENDERBOT_BROWSER", "chromium")
    from renderbot import app as app_module

    assert app_module.get_app() is server.mcp
    assert app_module.app is not None


def test_profile_lock_entries_are_released(renderer):
    seen = []

    def render(config):
        seen.append(list(server._profile_locks))
        return "text"

    renderer.render = render
    server._call_with_errors("render_page", lambda: RenderConfig(url="a.test", profile="work"))
    del renderer.render
    renderer.error = FormError("no form")
    server._call_with_errors("render_page", lambda: RenderConfig(url="a.test", profile="other"))

    assert seen == [["work"]]
    assert server._profile_locks == {}
