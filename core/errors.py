"""Typed failures raised by the who-is-out pipeline.

Structural failures derive from PipelineAbort and end the run. Expected
conditions (unparseable header label, discarded block, zero-hour block) are
handled where they occur and never show up here.
"""

from datetime import date
from typing import Optional, Sequence


class PipelineAbort(Exception):
    """Base class for failures that abort a whole run."""


class ReadinessTimeout(PipelineAbort, TimeoutError):
    """The selection-applied signal never reached a terminal state."""

    def __init__(self, last_value: Optional[str], timeout: float) -> None:
        self.last_value = last_value
        self.timeout = timeout
        super().__init__(
            f"Timed out after {timeout:g}s waiting for selection to apply. "
            f"Last seen: {last_value!r}"
        )


class RunBudgetExceeded(PipelineAbort, TimeoutError):
    """The run-wide wait budget was spent before a stage could start."""

    def __init__(self, stage: str, budget: float) -> None:
        self.stage = stage
        self.budget = budget
        super().__init__(f"Run budget of {budget:g}s exhausted before '{stage}'")


class DateNotInVisibleWindow(PipelineAbort, LookupError):
    """The requested business date has no column in the rendered week."""

    def __init__(self, target: date, visible: Sequence[date]) -> None:
        self.target = target
        self.visible = list(visible)
        shown = ", ".join(d.isoformat() for d in self.visible) or "(none)"
        super().__init__(
            f"Target date {target.isoformat()} not found in visible week header. "
            f"Visible dates: {shown}"
        )


class DeliveryFailure(PipelineAbort):
    """The messaging client reported a non-success result."""

    def __init__(self, error_code: str, error_message: str = "") -> None:
        self.error_code = error_code
        self.error_message = error_message
        detail = f": {error_message}" if error_message else ""
        super().__init__(f"Message delivery failed ({error_code}){detail}")


class TransientPageError(Exception):
    """Raised by the page collaborator for failures worth retrying."""
