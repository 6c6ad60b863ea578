"""Fatal error types raised by a render run.

Anything deriving from :class:`RenderError` aborts the run: the CLI prints a
single diagnostic and exits non-zero, the MCP server returns an error payload.
Non-fatal conditions are logged as warnings and never raised.
"""

from __future__ import annotations


class RenderError(RuntimeError):
    """Base class for failures that abort a render run."""


class RuntimeUnavailableError(RenderError):
    """The Playwright-managed browser binary is missing."""


class SessionStartError(RenderError):
    """The browser could not be launched with the requested profile."""


class NavigationError(RenderError):
    """A primary navigation (target or after-submit URL) failed."""


class FormError(RenderError):
    """A form field or submit target could not be located or used."""


class ScreenshotError(RenderError):
    """The requested screenshot could not be captured or written."""


class ConversionError(RenderError):
    """The rendered document could not be converted to text."""


__all__ = [
    "ConversionError",
    "FormError",
    "NavigationError",
    "RenderError",
    "RuntimeUnavailableError",
    "ScreenshotError",
    "SessionStartError",
]
