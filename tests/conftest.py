"""Shared fixtures: a scriptable stand-in for a Playwright page."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Tuple

import pytest

from renderbot.config import WaitPolicy


class FakeElement:
    """Records the interactions Renderbot performs on an element."""

    def __init__(self, page: "FakePage", selector: str, *, fail_on: Tuple[str, ...] = ()) -> None:
        self.page = page
        self.selector = selector
        self.value = ""
        self.fail_on = fail_on
        self.on_activate: Optional[Callable[[], None]] = None

    def _record(self, action: str, *args: Any) -> None:
        if action in self.fail_on:
            raise RuntimeError(f"{action} failed on {self.selector}")
        self.page.actions.append((action, self.selector) + args)

    def fill(self, value: str) -> None:
        self._record("fill", value)
        self.value = value

    def type(self, text: str) -> None:
        self._record("type", text)
        self.value += text

    def click(self) -> None:
        self._record("click")
        if self.on_activate:
            self.on_activate()

    def press(self, key: str) -> None:
        self._record("press", key)
        if self.on_activate:
            self.on_activate()


class FakePage:
    """Minimal synchronous Page double.

    ``scripts`` maps a substring of an evaluated script to its result; the
    first matching needle wins.  A result may be a value, a callable or an
    exception instance (raised).
    """

    def __init__(
        self,
        url: str = "about:blank",
        html: str = "<html><body></body></html>",
        scripts: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.url = url
        self.html = html
        self.scripts: Dict[str, Any] = dict(scripts or {})
        self.elements: Dict[str, FakeElement] = {}
        self.handlers: Dict[str, List[Callable[[Any], None]]] = {}
        self.evaluated: List[str] = []
        self.actions: List[Tuple[Any, ...]] = []
        self.waits: List[float] = []
        self.goto_error: Optional[Exception] = None
        self.goto_errors: Dict[str, Exception] = {}
        self.pages_by_url: Dict[str, str] = {}
        self.screenshots: List[str] = []
        self.screenshot_error: Optional[Exception] = None

    def add_element(self, selector: str, **kwargs: Any) -> FakeElement:
        element = FakeElement(self, selector, **kwargs)
        self.elements[selector] = element
        return element

    def evaluate(self, script: str, arg: Any = None) -> Any:
        self.evaluated.append(script)
        for needle, result in self.scripts.items():
            if needle in script:
                if isinstance(result, Exception):
                    raise result
                if callable(result):
                    return result()
                return result
        return None

    def query_selector(self, selector: str) -> Optional[FakeElement]:
        return self.elements.get(selector)

    def goto(self, url: str, **kwargs: Any) -> None:
        self.actions.append(("goto", url))
        if url in self.goto_errors:
            raise self.goto_errors[url]
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url
        if url in self.pages_by_url:
            self.html = self.pages_by_url[url]

    def content(self) -> str:
        return self.html

    def on(self, event: str, handler: Callable[[Any], None]) -> None:
        self.handlers.setdefault(event, []).append(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in self.handlers.get(event, []):
            handler(payload)

    def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)

    def screenshot(self, path: Optional[str] = None, **kwargs: Any) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append(str(path))
        return b"\x89PNG"


class FakeConsoleMessage:
    def __init__(self, type: str, text: str) -> None:
        self.type = type
        self.text = text


class FakeSession:
    """Stands in for BrowserSession; hands out a prepared FakePage."""

    instances: List["FakeSession"] = []

    def __init__(self, page: FakePage, profile_dir: Any, **options: Any) -> None:
        self.page = page
        self.profile_dir = profile_dir
        self.options = options
        self.entered = False
        self.exited = False
        FakeSession.instances.append(self)

    def __enter__(self) -> "FakeSession":
        self.entered = True
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.exited = True


@pytest.fixture
def fast_policy() -> WaitPolicy:
    return WaitPolicy(
        poll_interval=0.005,
        connect_timeout=0.05,
        loading_start_timeout=0.05,
        loading_stop_timeout=0.1,
        url_change_timeout=0.05,
        ready_state_timeout=0.05,
        dynamic_settle=0.1,
        static_settle=0.2,
        url_stabilize=0.5,
    )


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage(url="http://example.test/")


@pytest.fixture
def session_factory():
    FakeSession.instances = []

    def build(page: FakePage):
        def factory(profile_dir: Any, **options: Any) -> FakeSession:
            return FakeSession(page, profile_dir, **options)

        return factory

    return build
