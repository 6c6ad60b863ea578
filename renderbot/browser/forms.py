"""Form filling and mode-aware submission."""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from playwright.sync_api import ElementHandle, Page

from ..config import FormField
from ..errors import FormError
from .navigation import NavigationOutcome, NavigationWaiter
from .page_state import PageState

ACTIVATION_KEY = "Enter"

logger = logging.getLogger(__name__)


class FormAutomator:
    """Fill ``#form input[name=...]`` fields and submit the form.

    Every failure here is fatal: the first field that cannot be located or
    typed into aborts the run, and nothing is retried.
    """

    def __init__(self, waiter: NavigationWaiter) -> None:
        self.waiter = waiter

    def submit(
        self,
        page: Page,
        form_id: str,
        fields: Sequence[FormField],
        state: PageState,
    ) -> NavigationOutcome:
        self.fill(page, form_id, fields)
        previous_url = page.url
        if state.is_dynamic:
            # Push frameworks intercept submit events; a click is not reliable.
            self._press_activation_key(page, form_id)
            logger.info("Live form submitted")
        else:
            self._submit_static(page, form_id)
            logger.info("Form submitted")
        return self.waiter.wait(page, state.mode, previous_url)

    def fill(self, page: Page, form_id: str, fields: Sequence[FormField]) -> None:
        for item in fields:
            selector = f"#{form_id} input[name={json.dumps(item.name, ensure_ascii=False)}]"
            element = self._query(page, selector)
            if element is None:
                raise FormError(f"could not find input {item.name}")
            try:
                element.fill("")
            except Exception as exc:
                raise FormError(f"could not clear input {item.name}: {exc}") from exc
            try:
                element.type(item.value)
            except Exception as exc:
                raise FormError(f"could not fill input {item.name}: {exc}") from exc
            logger.debug("filled input %s", item.name)

    def _submit_static(self, page: Page, form_id: str) -> None:
        selector = f"#{form_id} input[type='submit'], #{form_id} button[type='submit']"
        button = self._query(page, selector)
        if button is None:
            self._press_activation_key(page, form_id)
            return
        try:
            button.click()
        except Exception as exc:
            raise FormError(f"could not click submit button: {exc}") from exc

    def _press_activation_key(self, page: Page, form_id: str) -> None:
        form = self._query(page, f"#{form_id}")
        if form is None:
            raise FormError(f"could not find form #{form_id}")
        try:
            form.press(ACTIVATION_KEY)
        except Exception as exc:
            raise FormError(f"could not submit form #{form_id}: {exc}") from exc

    def _query(self, page: Page, selector: str) -> Optional[ElementHandle]:
        try:
            return page.query_selector(selector)
        except Exception as exc:
            raise FormError(f"invalid selector {selector!r}: {exc}") from exc


__all__ = ["ACTIVATION_KEY", "FormAutomator"]
