"""Waiting for the page to settle after a form submission or injected script.

Push-rendered pages patch the DOM in place and never fire load events, so the
dynamic strategy watches the in-page loading flag maintained by
:class:`~renderbot.browser.page_state.PageStateDetector`.  Conventional pages
are handled by diffing the URL and polling ``document.readyState``.  None of
the waits here are fatal; a timeout is logged and the run carries on.
"""

from __future__ import annotations

import enum
import logging
from typing import Callable, Dict, Optional

from playwright.sync_api import Page

from ..config import WaitPolicy
from .page_state import PageMode, PageStateDetector
from .sync import poll

_READY_STATE_SCRIPT = "() => document.readyState === 'complete'"

logger = logging.getLogger(__name__)


class NavigationOutcome(enum.Enum):
    COMPLETED = "completed"
    NAVIGATED = "navigated"
    IN_PLACE = "in_place"
    TIMED_OUT = "timed_out"


class NavigationWaiter:
    """Pick and run the post-action wait strategy for a page mode."""

    def __init__(
        self,
        detector: PageStateDetector,
        *,
        policy: Optional[WaitPolicy] = None,
    ) -> None:
        self.detector = detector
        self.policy = policy or detector.policy
        self._strategies: Dict[PageMode, Callable[[Page, str], NavigationOutcome]] = {
            PageMode.DYNAMIC: self._wait_dynamic,
            PageMode.STATIC: self._wait_static,
        }

    def wait(self, page: Page, mode: PageMode, previous_url: str) -> NavigationOutcome:
        """Block until the action that followed ``previous_url`` has settled."""
        outcome = self._strategies[mode](page, previous_url)
        logger.debug("navigation wait (%s) finished: %s", mode.value, outcome.value)
        return outcome

    def _wait_dynamic(self, page: Page, previous_url: str) -> NavigationOutcome:
        policy = self.policy
        logger.info("Waiting for live navigation...")
        self._settle(page, policy.dynamic_settle)

        started = poll(
            lambda: self.detector.is_loading(page),
            policy.loading_start_timeout,
            interval=policy.poll_interval,
        )
        if not started:
            if _current_url(page) != previous_url:
                logger.info("URL changed, waiting for page to stabilize...")
                self._settle(page, policy.url_stabilize)
                return NavigationOutcome.NAVIGATED
            logger.info("No navigation detected (in-place update)")
            return NavigationOutcome.IN_PLACE

        finished = poll(
            lambda: not self.detector.is_loading(page),
            policy.loading_stop_timeout,
            interval=policy.poll_interval,
        )
        if not finished:
            logger.warning(
                "Navigation did not complete within %.1fs; continuing",
                policy.loading_stop_timeout,
            )
            return NavigationOutcome.TIMED_OUT
        logger.info("Live navigation completed")
        return NavigationOutcome.COMPLETED

    def _wait_static(self, page: Page, previous_url: str) -> NavigationOutcome:
        policy = self.policy
        logger.info("Waiting for page navigation...")
        self._settle(page, policy.static_settle)

        changed = poll(
            lambda: _current_url(page) != previous_url,
            policy.url_change_timeout,
            interval=policy.poll_interval,
        )
        if not changed:
            logger.info("No navigation detected (page update without URL change)")
            return NavigationOutcome.IN_PLACE

        logger.info("Navigation detected, waiting for page load...")
        loaded = poll(
            lambda: page.evaluate(_READY_STATE_SCRIPT),
            policy.ready_state_timeout,
            interval=policy.poll_interval,
        )
        if not loaded:
            logger.warning(
                "Page load wait timed out after %.1fs; continuing",
                policy.ready_state_timeout,
            )
            return NavigationOutcome.TIMED_OUT
        logger.info("Page load completed")
        return NavigationOutcome.NAVIGATED

    def _settle(self, page: Page, seconds: float) -> None:
        if seconds > 0:
            page.wait_for_timeout(seconds * 1000)


def _current_url(page: Page) -> str:
    return page.url


__all__ = ["NavigationOutcome", "NavigationWaiter"]
