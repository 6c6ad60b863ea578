"""Console capture for a render run.

Two channels feed the ``CONSOLE OUTPUT`` section:

* the instrumented channel wraps ``console.log/info/debug/warn/error`` inside
  the page and appends each call to a list kept on ``window``;
* the native channel buffers Playwright ``console`` warnings/errors and
  uncaught page errors as they are reported by the browser.

Both are read once, at the end of the run.  The instrumented list lives in
the document, so a full navigation after :meth:`ConsoleCapture.install`
discards whatever it had collected.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List

from playwright.sync_api import ConsoleMessage, Page

CAPTURE_GLOBAL = "__renderbotConsole"
INSTRUMENTED = "instrumented"
NATIVE = "native"

LOG_LEVELS = ("LOG", "INFO", "DEBUG", "WARNING", "ERROR", "SEVERE")
NATIVE_LEVELS = {"WARNING", "ERROR", "SEVERE"}

_INSTRUMENT_SCRIPT = """
() => {
    if (window.%(list)s) {
        return false;
    }
    window.%(list)s = [];
    ['log', 'warn', 'error', 'info', 'debug'].forEach(function (method) {
        var original = console[method];
        console[method] = function () {
            var args = Array.prototype.slice.call(arguments);
            var message = args.map(function (arg) {
                if (arg !== null && typeof arg === 'object') {
                    try { return JSON.stringify(arg); }
                    catch (e) { return String(arg); }
                }
                return String(arg);
            }).join(' ');
            window.%(list)s.push({ level: method, message: message });
            return original.apply(console, arguments);
        };
    });
    return true;
}
""" % {"list": CAPTURE_GLOBAL}

_COLLECT_SCRIPT = f"() => window.{CAPTURE_GLOBAL} || []"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    level: str
    message: str
    source: str = INSTRUMENTED

    def render(self) -> str:
        return f"[{self.level}] {self.message}"


def normalize_level(level: Any) -> str:
    """Upper-case a console level and expand ``WARN`` to ``WARNING``."""
    text = str(level or "").strip().upper()
    if not text:
        return "LOG"
    if text == "WARN":
        return "WARNING"
    return text


class ConsoleCapture:
    """Collect console output from the instrumented and native channels."""

    def __init__(self) -> None:
        self._native: List[LogEntry] = []
        self._collected = False

    def attach(self, page: Page) -> None:
        """Subscribe to the browser's own console/error reports."""
        page.on("console", self._on_console)
        page.on("pageerror", self._on_page_error)

    def install(self, page: Page) -> bool:
        """Wrap the page's console methods, once per document."""
        try:
            installed = page.evaluate(_INSTRUMENT_SCRIPT)
        except Exception as exc:
            logger.warning("Could not inject console capture: %s", exc)
            return False
        if not installed:
            logger.debug("Console capture already installed")
        return True

    def collect(self, page: Page) -> List[LogEntry]:
        """Return instrumented entries followed by native ones.

        Meant to be called once, at the end of the run.
        """
        if self._collected:
            logger.debug("Console output collected more than once")
        self._collected = True
        entries = self._instrumented_entries(page)
        entries.extend(self._native_entries())
        return entries

    def _instrumented_entries(self, page: Page) -> List[LogEntry]:
        try:
            raw = page.evaluate(_COLLECT_SCRIPT)
        except Exception as exc:
            logger.debug("Instrumented console capture unavailable: %s", exc)
            return []
        entries: List[LogEntry] = []
        for item in raw or []:
            if not isinstance(item, dict):
                continue
            message = item.get("message")
            entries.append(
                LogEntry(
                    level=normalize_level(item.get("level")),
                    message=message if isinstance(message, str) else "",
                    source=INSTRUMENTED,
                )
            )
        return entries

    def _native_entries(self) -> List[LogEntry]:
        entries = list(self._native)
        self._native.clear()
        return entries

    def _on_console(self, message: ConsoleMessage) -> None:
        try:
            level = normalize_level(message.type)
            if level not in NATIVE_LEVELS:
                return
            self._native.append(LogEntry(level=level, message=message.text, source=NATIVE))
        except Exception as exc:
            logger.warning("Could not read browser log entry: %s", exc)

    def _on_page_error(self, error: Any) -> None:
        text = getattr(error, "message", None) or str(error)
        self._native.append(LogEntry(level="SEVERE", message=text, source=NATIVE))


__all__ = [
    "CAPTURE_GLOBAL",
    "ConsoleCapture",
    "INSTRUMENTED",
    "LOG_LEVELS",
    "LogEntry",
    "NATIVE",
    "NATIVE_LEVELS",
    "normalize_level",
]
