"""Final retrieval and assembly of a render run's output."""

from __future__ import annotations

import logging

from playwright.sync_api import Page

from ..config import RenderConfig
from ..errors import ConversionError, NavigationError
from ..text import format_output, html_to_text, normalize_text, truncate_text
from .console import ConsoleCapture

logger = logging.getLogger(__name__)


class ContentPipeline:
    """Fetch the rendered document and the console log, then format both."""

    def produce(self, page: Page, config: RenderConfig, console: ConsoleCapture) -> str:
        after_submit = config.resolved_after_submit_url
        if after_submit:
            logger.info("Navigating to after-submit URL: %s", after_submit)
            try:
                page.goto(after_submit)
            except Exception as exc:
                raise NavigationError(f"could not navigate to after-submit URL: {exc}") from exc

        try:
            html = page.content()
        except Exception as exc:
            raise NavigationError(f"could not get page content: {exc}") from exc

        entries = console.collect(page)

        if config.raw:
            return html

        try:
            text = normalize_text(html_to_text(html))
        except Exception as exc:
            raise ConversionError(f"could not convert HTML to text: {exc}") from exc

        if len(text) > config.truncate_after:
            logger.info("Truncating %d chars to %d", len(text), config.truncate_after)
        text = truncate_text(text, config.truncate_after)
        return format_output(config.target_url, text, [entry.render() for entry in entries])


__all__ = ["ContentPipeline"]
