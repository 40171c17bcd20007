"""Poll-until-terminal state machine and run-wide wait budget.

The scheduling UI gives no completion event for its bulk "apply selection"
action, so readiness is modelled as repeated sampling of an observable value
until a terminal predicate holds or the timeout elapses.
"""

import re
import time
from typing import Callable, Optional, Tuple

from core.errors import ReadinessTimeout, RunBudgetExceeded
from core.logger import get_logger

logger = get_logger(__name__)

# "39 / 39", "39/39", " 12 /40 "
SELECTION_RATIO_RE = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")
SELECTION_DONE_TOKEN = "100%"


def parse_selection_counter(text: Optional[str]) -> Optional[Tuple[int, int]]:
    """
    Parse a selection counter like "12 / 39" into (selected, total).

    Returns:
        Tuple of ints, or None when the text is not a ratio.
    """
    if not text:
        return None
    match = SELECTION_RATIO_RE.match(text)
    if not match:
        return None
    return int(match.group(1)), int(match.group(2))


def is_selection_applied(text: Optional[str]) -> bool:
    """
    Terminal predicate for the "select all, then Update" counter.

    Ready when the counter reads "N / M" with M > 0 and N == M, or when it
    shows the literal "100%" token. The UI briefly reports "0 / 0" before
    the real total is known; that state is never terminal.
    """
    if not text:
        return False
    stripped = text.strip()
    if stripped == SELECTION_DONE_TOKEN:
        return True
    ratio = parse_selection_counter(stripped)
    if ratio is None:
        return False
    selected, total = ratio
    return total > 0 and selected == total


def await_ready(
    sample_fn: Callable[[], str],
    is_terminal: Callable[[str], bool],
    timeout: float,
    poll_interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Sample an observable value until it reaches a terminal state.

    Each tick samples, checks the predicate, and sleeps poll_interval when
    not terminal. Errors raised by sample_fn count as "not yet". The sleep
    is shortened so the loop never runs past the timeout.

    Args:
        sample_fn: Returns the current observed text.
        is_terminal: Predicate deciding whether a sample means "ready".
        timeout: Seconds to keep polling.
        poll_interval: Seconds between samples.
        clock: Monotonic clock (injectable for tests).
        sleep: Sleep function (injectable for tests).

    Returns:
        The terminal sample.

    Raises:
        ReadinessTimeout: If timeout elapses first. Carries the last
            non-empty observed value.
    """
    start = clock()
    last_seen: Optional[str] = None
    attempts = 0

    while True:
        attempts += 1
        try:
            value = sample_fn()
        except Exception as e:
            logger.debug(f"Readiness sample {attempts} failed: {e}")
            value = None

        if value is not None:
            value = str(value).strip()
            if value:
                last_seen = value
            if is_terminal(value):
                logger.info(f"Ready after {attempts} sample(s): {value!r}")
                return value

        elapsed = clock() - start
        remaining = timeout - elapsed
        if remaining <= 0:
            logger.error(f"Readiness timed out after {attempts} sample(s), last seen {last_seen!r}")
            raise ReadinessTimeout(last_seen, timeout)

        sleep(min(poll_interval, remaining))


class TimeBudget:
    """
    Run-wide cap on the sum of all timed waits.

    Every stage asks the budget to clamp its own timeout; once the deadline
    passes, the next stage aborts the run.
    """

    def __init__(
        self,
        total_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.total_seconds = total_seconds
        self._clock = clock
        self._deadline = clock() + total_seconds

    def remaining(self) -> float:
        """Seconds left before the run deadline (never negative)."""
        return max(0.0, self._deadline - self._clock())

    def clamp(self, timeout: float, stage: str) -> float:
        """
        Limit a stage timeout to what is left of the budget.

        Raises:
            RunBudgetExceeded: If nothing is left.
        """
        left = self.remaining()
        if left <= 0:
            raise RunBudgetExceeded(stage, self.total_seconds)
        return min(timeout, left)

    def __repr__(self) -> str:
        return f"TimeBudget(total={self.total_seconds:g}s, remaining={self.remaining():.1f}s)"
