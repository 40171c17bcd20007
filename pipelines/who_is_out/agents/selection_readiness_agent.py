"""
Selection Readiness Agent for the Who-Is-Out pipeline.

Triggers the bulk "select all employees, then Update" action and blocks
until the selection counter reports it has taken effect. Nothing read from
the grid before that point can be trusted.

Integration Position:
    SelectionReadinessAgent   ← THIS AGENT
            ↓
    DateReconcilerAgent
            ↓
    EntryExtractorAgent
"""

from typing import Any, Dict

from core.contracts.schedule_page import SchedulePage
from core.logger import get_logger
from core.polling import (
    TimeBudget,
    await_ready,
    is_selection_applied,
    parse_selection_counter,
)
from core.retry import call_with_retry
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.config import (
    PAGE_CALL_ATTEMPTS,
    PAGE_CALL_BACKOFF_SECONDS,
    RunConfig,
)

logger = get_logger(__name__)


class SelectionReadinessAgent(BaseAgent):
    """
    Agent that applies select-all and waits for the readiness signal.

    Input: schedule_page, run_config, time_budget (optional)
    Output: selection_status (terminal counter text),
            selection_counter ((selected, total) or None for "100%")

    Raises:
        ReadinessTimeout: Counter never reached a terminal state.
        RunBudgetExceeded: No run budget left to wait in.
    """

    def __init__(self) -> None:
        """Initialize the selection readiness agent."""
        super().__init__(name="SelectionReadinessAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        page: SchedulePage = self.require(input_data, "schedule_page")
        config: RunConfig = input_data.get("run_config") or RunConfig()
        budget: TimeBudget | None = input_data.get("time_budget")

        call_with_retry(
            page.apply_select_all,
            attempts=PAGE_CALL_ATTEMPTS,
            backoff_seconds=PAGE_CALL_BACKOFF_SECONDS,
            description="apply_select_all",
        )

        timeout = config.readiness_timeout
        if budget is not None:
            timeout = budget.clamp(timeout, self.name)

        status = await_ready(
            page.sample_selection_counter_text,
            is_selection_applied,
            timeout=timeout,
            poll_interval=config.readiness_poll_interval,
        )
        logger.info(f"Selection status after Update: {status}")

        return {
            "selection_status": status,
            "selection_counter": parse_selection_counter(status),
        }
