"""Bounded retry combinator used by the database keep-alive ping."""
from __future__ import annotations

import time
from typing import Callable, Optional, TypeVar

from ..core.constants import DEFAULT_RETRY_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from ..core.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def retry_call(
    fn: Callable[[], T],
    *,
    attempts: int = DEFAULT_RETRY_ATTEMPTS,
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    label: str = "call",
) -> Optional[T]:
    """Call `fn` up to `attempts` times, waiting `delay_seconds` in between.

    Returns None once every attempt has failed; the last error is logged.
    """

    attempts = max(1, int(attempts))
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except Exception as e:
            if attempt >= attempts:
                logger.warning("%s failed after %d attempts: %s", label, attempts, e)
                return None
            logger.warning("%s failed (attempt %d/%d): %s", label, attempt, attempts, e)
            sleep(delay_seconds)
    return None
