"""Browser-side engine: session, page state, console, forms, navigation."""

from .console import ConsoleCapture, LogEntry
from .content import ContentPipeline
from .core import Renderer, create_renderer
from .forms import FormAutomator
from .navigation import NavigationOutcome, NavigationWaiter
from .page_state import PageMode, PageState, PageStateDetector
from .session import BrowserSession
from .sync import poll

__all__ = [
    "BrowserSession",
    "ConsoleCapture",
    "ContentPipeline",
    "FormAutomator",
    "LogEntry",
    "NavigationOutcome",
    "NavigationWaiter",
    "PageMode",
    "PageState",
    "PageStateDetector",
    "Renderer",
    "create_renderer",
    "poll",
]
