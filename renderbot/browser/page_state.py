"""Static/dynamic page classification and in-page navigation tracking.

A page is *dynamic* when it is rendered by a push framework (Phoenix LiveView
by default): the server patches the DOM over a socket, so submissions and
navigations may never fire a load event.  For those pages we wait for the
socket to connect and install listeners on the framework's page-loading
events, which flip a flag kept on ``window``.  The flag is gone after a full
document navigation, so it is only ever read through script execution.
"""

from __future__ import annotations

import enum
import json
import logging
from dataclasses import dataclass
from typing import Optional

from playwright.sync_api import Page

from ..config import PHOENIX_LIVEVIEW, PushFramework, WaitPolicy
from .sync import poll

NAVIGATION_STATE_GLOBAL = "__renderbotNavigation"

_LOADING_SCRIPT = (
    f"() => Boolean(window.{NAVIGATION_STATE_GLOBAL} && "
    f"window.{NAVIGATION_STATE_GLOBAL}.loading === true)"
)

_LISTENER_TEMPLATE = """
() => {
    if (window.%(state)s) {
        return false;
    }
    window.%(state)s = { loading: false };
    document.addEventListener(%(start)s, function () {
        window.%(state)s.loading = true;
    });
    document.addEventListener(%(stop)s, function () {
        window.%(state)s.loading = false;
    });
    return true;
}
"""

logger = logging.getLogger(__name__)


class PageMode(enum.Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


@dataclass(frozen=True)
class PageState:
    """Classification of the document loaded by the last full navigation."""

    mode: PageMode
    connected: Optional[bool] = None

    @property
    def is_dynamic(self) -> bool:
        return self.mode is PageMode.DYNAMIC


class PageStateDetector:
    """Classify a page once and expose its in-page loading flag."""

    def __init__(
        self,
        *,
        framework: PushFramework = PHOENIX_LIVEVIEW,
        policy: Optional[WaitPolicy] = None,
    ) -> None:
        self.framework = framework
        self.policy = policy or WaitPolicy()

    def classify(self, page: Page) -> PageState:
        """Probe for the framework marker and prepare dynamic pages."""
        if not self._has_marker(page):
            logger.info("Static page detected")
            return PageState(mode=PageMode.STATIC)

        logger.info("Detected %s page, waiting for connection...", self.framework.name)
        connected = self.wait_connected(page)
        if connected:
            logger.info("%s connected", self.framework.name)
        else:
            logger.warning(
                "Could not detect %s connection within %.1fs; continuing",
                self.framework.name,
                self.policy.connect_timeout,
            )
        self.install_listeners(page)
        return PageState(mode=PageMode.DYNAMIC, connected=connected)

    def wait_connected(self, page: Page) -> bool:
        selector = self.framework.connected_selector
        return poll(
            lambda: page.query_selector(selector) is not None,
            self.policy.connect_timeout,
            interval=self.policy.poll_interval,
        )

    def install_listeners(self, page: Page) -> bool:
        """Install the loading-flag listeners unless already present.

        Returns ``True`` when the listeners are in place after the call.
        """
        script = _LISTENER_TEMPLATE % {
            "state": NAVIGATION_STATE_GLOBAL,
            "start": json.dumps(self.framework.loading_start_event),
            "stop": json.dumps(self.framework.loading_stop_event),
        }
        try:
            installed = page.evaluate(script)
        except Exception as exc:
            logger.warning("Could not inject %s navigation listeners: %s", self.framework.name, exc)
            return False
        if not installed:
            logger.debug("Navigation listeners already installed")
        return True

    def is_loading(self, page: Page) -> bool:
        return bool(page.evaluate(_LOADING_SCRIPT))

    def _has_marker(self, page: Page) -> bool:
        script = f"() => document.querySelector({json.dumps(self.framework.marker_selector)}) !== null"
        try:
            return bool(page.evaluate(script))
        except Exception as exc:
            logger.debug("Marker probe failed, treating page as static: %s", exc)
            return False


__all__ = [
    "NAVIGATION_STATE_GLOBAL",
    "PageMode",
    "PageState",
    "PageStateDetector",
]
