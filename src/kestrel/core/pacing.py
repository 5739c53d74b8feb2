from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def sleep(seconds: float) -> None:
    if seconds > 0:
        time.sleep(seconds)


def sleep_random(min_sec: float, max_sec: float) -> float:
    """Sleep a uniformly random duration, like a person pausing between actions."""
    duration = random.uniform(min_sec, max_sec)
    logger.debug("Sleeping for %.2fs", duration)
    sleep(duration)
    return duration


def retry_with_backoff(
    action: Callable[[], T],
    *,
    attempts: int,
    base_delay: float,
    retryable: tuple[type[BaseException], ...] = (Exception,),
    label: str = "operation",
) -> T:
    """Run ``action`` up to ``attempts`` times, doubling the delay after each failure."""
    delay = base_delay
    for attempt in range(1, attempts + 1):
        try:
            return action()
        except retryable as exc:
            if attempt == attempts:
                logger.error("%s failed after %d attempts: %s", label, attempts, exc)
                raise
            logger.warning(
                "%s attempt %d/%d failed (%s), retrying in %.1fs", label, attempt, attempts, exc, delay
            )
            sleep(delay)
            delay *= 2
    raise RuntimeError(f"{label} was given no attempts")
