"""Retry helper with exponential backoff used by the fetch and LLM stages."""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


class RetryError(RuntimeError):
    """Raised when every attempt of a retried operation failed."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        super().__init__(f"Operation failed after {attempts} attempt(s): {last_error}")
        self.last_error = last_error
        self.attempts = attempts


def exponential_backoff(attempt: int) -> float:
    """Seconds to wait after failed attempt ``attempt`` (1-based): 2, 4, 8, ..."""

    return float(2**attempt)


def retry_with_backoff(
    operation: Callable[[], T],
    *,
    attempts: int,
    delay: Callable[[int], float] = exponential_backoff,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
    label: str = "operation",
) -> T:
    """Call ``operation`` until it succeeds or ``attempts`` calls have failed.

    ``delay(n)`` is waited between failed attempt ``n`` and attempt ``n + 1``;
    nothing is waited after the final failure. Exceptions outside ``retry_on``
    propagate immediately.
    """

    if attempts < 1:
        raise ValueError("attempts must be at least 1")

    last_error: BaseException | None = None
    for attempt in range(1, attempts + 1):
        try:
            return operation()
        except retry_on as exc:
            last_error = exc
            logger.warning(
                "{} failed (attempt {}/{}): {}: {}",
                label,
                attempt,
                attempts,
                type(exc).__name__,
                exc,
            )
            if attempt >= attempts:
                break
            wait = delay(attempt)
            if on_retry is not None:
                on_retry(attempt, exc, wait)
            logger.info("Retrying {} in {:.0f}s ({}/{})", label, wait, attempt, attempts - 1)
            sleep(wait)

    assert last_error is not None
    raise RetryError(last_error, attempts) from last_error


__all__ = ["RetryError", "exponential_backoff", "retry_with_backoff"]
