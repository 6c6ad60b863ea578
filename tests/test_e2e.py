"""Real-browser runs against a local HTTP server.

Deselected by default; run with ``pytest -m e2e`` after
``playwright install firefox``.
"""

from __future__ import annotations

import functools
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer

import pytest

from renderbot.browser.console import ConsoleCapture
from renderbot.browser.core import Renderer
from renderbot.browser.session import BrowserSession
from renderbot.config import FormField, RenderConfig, profile_dir

pytestmark = pytest.mark.e2e


class _QuietHandler(SimpleHTTPRequestHandler):
    def log_message(self, format, *args):
        pass


@pytest.fixture
def site(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    handler = functools.partial(_QuietHandler, directory=str(root))
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    try:
        yield root, f"http://127.0.0.1:{httpd.server_address[1]}"
    finally:
        httpd.shutdown()
        httpd.server_close()


@pytest.fixture
def renderer(tmp_path):
    return Renderer(home=tmp_path / "home")


def test_static_page_text(site, renderer):
    root, base = site
    (root / "index.html").write_text(
        "<html><head><title>t</title></head><body>"
        "<h1>Hello</h1><ul><li>one</li><li>two</li></ul>"
        "<script>document.body.appendChild(document.createTextNode('added'))</script>"
        "</body></html>"
    )

    output = renderer.render(RenderConfig(url=f"{base}/index.html"))

    assert f"{base}/index.html" in output
    assert "# Hello" in output
    assert "- one\n- two" in output
    assert "added" in output


def test_console_object_arguments_are_serialized(site, renderer):
    root, base = site
    (root / "page.html").write_text("<html><body><p>x</p></body></html>")

    output = renderer.render(
        RenderConfig(url=f"{base}/page.html", script="console.log({a: 1, b: [2, 3]}, 'tail');")
    )

    assert "CONSOLE OUTPUT:" in output
    assert '[LOG] {"a":1,"b":[2,3]} tail' in output


def test_repeated_instrumentation_wraps_once(site, tmp_path):
    root, base = site
    (root / "page.html").write_text("<html><body><p>x</p></body></html>")
    capture = ConsoleCapture()

    with BrowserSession(profile_dir("default", home=tmp_path / "home")) as session:
        page = session.page
        page.goto(f"{base}/page.html")
        assert capture.install(page)
        assert capture.install(page)
        page.evaluate("() => console.info('probe')")
        entries = capture.collect(page)

    assert [entry.render() for entry in entries] == ["[INFO] probe"]


def test_form_submission_follows_navigation(site, renderer):
    root, base = site
    (root / "form.html").write_text(
        '<html><body><form id="search" action="result.html" method="get">'
        '<input name="q"><input type="submit" value="Go"></form></body></html>'
    )
    (root / "result.html").write_text("<html><body><p>Results page</p></body></html>")

    output = renderer.render(
        RenderConfig(
            url=f"{base}/form.html",
            form_id="search",
            fields=(FormField("q", "renderbot"),),
        )
    )

    assert "Results page" in output
