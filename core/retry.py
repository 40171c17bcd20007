"""Bounded retry wrapper for page-collaborator calls."""

import time
from typing import Callable, Tuple, Type, TypeVar

from core.errors import TransientPageError
from core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_ATTEMPTS = 3
DEFAULT_BACKOFF_SECONDS = 1.0


def call_with_retry(
    fn: Callable[[], T],
    attempts: int = DEFAULT_ATTEMPTS,
    backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
    incremental: bool = True,
    retry_on: Tuple[Type[BaseException], ...] = (TransientPageError,),
    description: str = "page call",
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Call fn, retrying transient failures a bounded number of times.

    Args:
        fn: Zero-argument callable to invoke.
        attempts: Total attempts including the first (>= 1).
        backoff_seconds: Delay before the second attempt.
        incremental: Grow the delay linearly (1x, 2x, 3x...) when True,
            otherwise keep it fixed.
        retry_on: Exception types considered transient.
        description: Label used in log messages.
        sleep: Sleep function (injectable for tests).

    Returns:
        Whatever fn returns.

    Raises:
        ValueError: If attempts < 1.
        The last transient exception once attempts are exhausted; any
        non-transient exception immediately.
    """
    if attempts < 1:
        raise ValueError(f"attempts must be >= 1, got {attempts}")

    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == attempts:
                logger.error(f"{description} failed after {attempts} attempt(s): {e}")
                raise
            delay = backoff_seconds * attempt if incremental else backoff_seconds
            logger.warning(
                f"{description} failed (attempt {attempt}/{attempts}): {e}. "
                f"Retrying in {delay:g}s"
            )
            sleep(delay)

    raise AssertionError("unreachable")
