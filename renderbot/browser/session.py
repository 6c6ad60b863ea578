"""Scoped Playwright session bound to a persistent browser profile.

A session owns the Playwright driver, one persistent browser context (the
browser process, launched on ``<home>/profiles/<name>``) and its first page.
Cookies and storage written by one run are visible to the next run that uses
the same profile; two concurrent runs on one profile are not coordinated.
"""

from __future__ import annotations

import logging
from contextlib import AbstractContextManager
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

from playwright.sync_api import BrowserContext, Page, Playwright, sync_playwright

from ..config import DEFAULT_BROWSER, SUPPORTED_BROWSERS
from ..errors import RuntimeUnavailableError, SessionStartError

# Mirror page console output on the browser's stdout (Firefox only).
FIREFOX_PREFS: Dict[str, Any] = {"devtools.console.stdout.content": True}

logger = logging.getLogger(__name__)


class BrowserSession(AbstractContextManager["BrowserSession"]):
    """Launch a headless browser on ``profile_dir`` and release it on exit."""

    def __init__(
        self,
        profile_dir: Path,
        *,
        browser: str = DEFAULT_BROWSER,
        headless: bool = True,
        executable_path: Optional[str] = None,
        launch_args: Optional[Sequence[str]] = None,
        default_timeout_ms: int = 30000,
        playwright_factory: Callable[[], Any] = sync_playwright,
    ) -> None:
        if browser not in SUPPORTED_BROWSERS:
            allowed = ", ".join(sorted(SUPPORTED_BROWSERS))
            raise ValueError(f"browser must be one of {{{allowed}}}.")
        self.profile_dir = Path(profile_dir)
        self.browser = browser
        self._headless = headless
        self._executable_path = executable_path
        self._launch_args = tuple(launch_args or ())
        self._default_timeout_ms = default_timeout_ms
        self._playwright_factory = playwright_factory
        self._playwright: Playwright | None = None
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    # ------------------------------------------------------------------ #
    # Lifecycle helpers
    # ------------------------------------------------------------------ #

    def __enter__(self) -> "BrowserSession":
        self.startup()
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.shutdown()

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session is not started.")
        return self._page

    def launch_options(self) -> Dict[str, Any]:
        """Return the keyword arguments passed to ``launch_persistent_context``."""
        options: Dict[str, Any] = {
            "headless": self._headless,
            "args": list(self._launch_args),
        }
        if self._executable_path:
            options["executable_path"] = self._executable_path
        if self.browser == "firefox":
            options["firefox_user_prefs"] = dict(FIREFOX_PREFS)
        return options

    def startup(self) -> None:
        """Start Playwright and open the profile's browser context."""
        if self._playwright is not None:
            return
        try:
            try:
                self.profile_dir.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise SessionStartError(
                    f"could not create profile directory {self.profile_dir}: {exc}"
                ) from exc
            try:
                self._playwright = self._playwright_factory().start()
            except Exception as exc:
                raise SessionStartError(f"could not start Playwright: {exc}") from exc
            browser_type = getattr(self._playwright, self.browser)
            self._check_runtime(browser_type)
            try:
                self._context = browser_type.launch_persistent_context(
                    str(self.profile_dir),
                    **self.launch_options(),
                )
            except Exception as exc:
                raise SessionStartError(
                    f"could not start {self.browser} with profile {self.profile_dir}: {exc}"
                ) from exc
            self._context.set_default_timeout(self._default_timeout_ms)
            pages = self._context.pages
            self._page = pages[0] if pages else self._context.new_page()
            self._page.set_default_timeout(self._default_timeout_ms)
        except BaseException:
            self.shutdown()
            raise
        logger.info("Started %s session on profile %s", self.browser, self.profile_dir)

    def shutdown(self) -> None:
        """Close the browser and stop Playwright; safe to call repeatedly."""
        self._page = None
        if self._context is not None:
            try:
                self._context.close()
            except Exception as exc:
                logger.debug("Error closing browser context: %s", exc)
            finally:
                self._context = None
        if self._playwright is not None:
            try:
                self._playwright.stop()
            except Exception as exc:
                logger.debug("Error stopping Playwright: %s", exc)
            finally:
                self._playwright = None

    def _check_runtime(self, browser_type: Any) -> None:
        binary = self._executable_path or browser_type.executable_path
        if not binary or not Path(binary).exists():
            raise RuntimeUnavailableError(
                f"{self.browser} binary not found at {binary!r}; "
                f"run `playwright install {self.browser}` first."
            )


__all__ = ["BrowserSession", "FIREFOX_PREFS"]
