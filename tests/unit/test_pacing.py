from __future__ import annotations

import pytest

from kestrel.core import pacing
from kestrel.errors import NavigationError


def test_retry_with_backoff_doubles_delay(sleeps) -> None:
    attempts = {"count": 0}

    def flaky() -> str:
        attempts["count"] += 1
        if attempts["count"] < 3:
            raise NavigationError("not yet")
        return "loaded"

    result = pacing.retry_with_backoff(flaky, attempts=3, base_delay=2.0, retryable=(NavigationError,))

    assert result == "loaded"
    assert sleeps == [2.0, 4.0]


def test_retry_with_backoff_reraises_after_last_attempt(sleeps) -> None:
    def always_fails() -> None:
        raise NavigationError("never loads")

    with pytest.raises(NavigationError, match="never loads"):
        pacing.retry_with_backoff(always_fails, attempts=3, base_delay=1.0, retryable=(NavigationError,))
    assert sleeps == [1.0, 2.0]


def test_retry_with_backoff_does_not_retry_other_errors(sleeps) -> None:
    calls = {"count": 0}

    def broken() -> None:
        calls["count"] += 1
        raise KeyError("bug")

    with pytest.raises(KeyError):
        pacing.retry_with_backoff(broken, attempts=3, base_delay=1.0, retryable=(NavigationError,))
    assert calls["count"] == 1
    assert sleeps == []


def test_sleep_random_stays_in_range(sleeps) -> None:
    duration = pacing.sleep_random(5, 34)
    assert 5 <= duration <= 34
    assert sleeps == [duration]
