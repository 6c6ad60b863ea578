"""Single-call page rendering for Renderbot.

`Renderer.render` runs one complete session: open the profile's browser,
load the target URL, classify the page, optionally submit a form and run
injected script, optionally take a screenshot, and return the page as
normalized text followed by whatever the console printed.  Every wait is
bounded; only failures on primary actions abort the run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from playwright.sync_api import Page

from ..config import (
    DEFAULT_BROWSER,
    PHOENIX_LIVEVIEW,
    PushFramework,
    RenderConfig,
    WaitPolicy,
    profile_dir,
)
from ..errors import NavigationError, ScreenshotError
from .console import ConsoleCapture
from .content import ContentPipeline
from .forms import FormAutomator
from .navigation import NavigationOutcome, NavigationWaiter
from .page_state import PageMode, PageState, PageStateDetector
from .session import BrowserSession

SessionFactory = Callable[..., BrowserSession]

logger = logging.getLogger(__name__)


class Renderer:
    """Render pages through a fresh browser session per call."""

    def __init__(
        self,
        *,
        headless: bool = True,
        browser: str = DEFAULT_BROWSER,
        executable_path: Optional[str] = None,
        home: Optional[Path] = None,
        policy: Optional[WaitPolicy] = None,
        framework: PushFramework = PHOENIX_LIVEVIEW,
        session_factory: SessionFactory = BrowserSession,
    ) -> None:
        self._headless = headless
        self._browser = browser
        self._executable_path = executable_path
        self._home = home
        self._policy = policy or WaitPolicy()
        self._framework = framework
        self._session_factory = session_factory
        self._pipeline = ContentPipeline()

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def render(self, config: RenderConfig) -> str:
        """Run one session for ``config`` and return the composed output."""
        self._log_call(
            "render",
            url=config.target_url,
            profile=config.profile,
            form_id=config.form_id,
            fields_count=len(config.fields) or None,
            after_submit_url=config.resolved_after_submit_url,
            script_chars=len(config.script) if config.script else None,
            screenshot_path=str(config.screenshot_path) if config.screenshot_path else None,
            raw=config.raw,
            truncate_after=config.truncate_after,
        )
        detector = PageStateDetector(framework=self._framework, policy=self._policy)
        waiter = NavigationWaiter(detector, policy=self._policy)
        forms = FormAutomator(waiter)
        console = ConsoleCapture()

        session = self._session_factory(
            profile_dir(config.profile, home=self._home),
            browser=self._browser,
            headless=self._headless,
            executable_path=self._executable_path,
        )
        with session:
            page = session.page
            console.attach(page)
            self._navigate(page, config.target_url)
            console.install(page)
            state = detector.classify(page)

            if config.wants_form:
                outcome = forms.submit(page, config.form_id or "", config.fields, state)
                self._note_navigation(state, outcome)

            if config.script:
                outcome = self._run_script(page, config.script, state, waiter)
                self._note_navigation(state, outcome)

            if config.screenshot_path:
                self._screenshot(page, Path(config.screenshot_path))

            if config.resolved_after_submit_url:
                logger.warning(
                    "Console output captured before the after-submit navigation will be lost"
                )
            output = self._pipeline.produce(page, config, console)

        self._log_result(
            "render",
            {"url": config.target_url, "mode": state.mode.value, "output": output},
        )
        return output

    # ------------------------------------------------------------------ #
    # Internal helpers
    # ------------------------------------------------------------------ #

    def _navigate(self, page: Page, url: str) -> None:
        try:
            page.goto(url)
        except Exception as exc:
            raise NavigationError(f"could not navigate to {url}: {exc}") from exc

    def _run_script(
        self,
        page: Page,
        script: str,
        state: PageState,
        waiter: NavigationWaiter,
    ) -> NavigationOutcome:
        previous_url = page.url
        try:
            page.evaluate(_as_function(script))
        except Exception as exc:
            logger.warning("JavaScript execution failed: %s", exc)
        return waiter.wait(page, state.mode, previous_url)

    def _screenshot(self, page: Page, path: Path) -> None:
        try:
            page.screenshot(path=str(path))
        except Exception as exc:
            raise ScreenshotError(f"error taking screenshot: {exc}") from exc
        logger.info("Screenshot saved to %s", path)

    def _note_navigation(self, state: PageState, outcome: NavigationOutcome) -> None:
        if state.mode is PageMode.STATIC and outcome in (
            NavigationOutcome.NAVIGATED,
            NavigationOutcome.TIMED_OUT,
        ):
            logger.warning("Full page navigation reset the console capture")

    def _log_call(self, action: str, **kwargs: Any) -> None:
        logger.info("%s call: %s", action, {k: v for k, v in kwargs.items() if v is not None})

    def _log_result(self, action: str, result: Mapping[str, Any]) -> None:
        summary: Dict[str, Any] = {}
        for key, value in result.items():
            if key == "output" and isinstance(value, str):
                summary[key] = f"<{len(value)} chars>"
            else:
                summary[key] = value
        logger.info("%s result: %s", action, summary)


def _as_function(script: str) -> str:
    """Wrap caller script as a function body so top-level ``return`` works."""
    return "() => {\n" + script + "\n}"


def create_renderer(
    *,
    headless: bool = True,
    browser: str = DEFAULT_BROWSER,
    home: Optional[Path] = None,
) -> Renderer:
    """Factory helper mirroring the CLI and MCP defaults."""
    return Renderer(headless=headless, browser=browser, home=home)


__all__ = ["Renderer", "create_renderer"]
