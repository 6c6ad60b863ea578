"""Bounded polling shared by every wait in a render run."""

from __future__ import annotations

import logging
import time
from typing import Callable

DEFAULT_POLL_INTERVAL = 0.1

logger = logging.getLogger(__name__)


def poll(
    condition: Callable[[], object],
    timeout: float,
    *,
    interval: float = DEFAULT_POLL_INTERVAL,
) -> bool:
    """Evaluate ``condition`` until it is truthy or ``timeout`` seconds pass.

    A condition that raises counts as "not yet satisfied".  Returns ``False``
    on timeout instead of raising, leaving the caller to decide whether the
    miss matters.  A zero timeout evaluates the condition exactly once.
    """
    deadline = time.monotonic() + max(float(timeout), 0.0)
    step = max(float(interval), 0.0)
    while True:
        try:
            if condition():
                return True
        except Exception as exc:
            logger.debug("poll condition not ready: %s", exc)
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            return False
        time.sleep(min(step, remaining))


__all__ = ["DEFAULT_POLL_INTERVAL", "poll"]
