"""Presenter agent: renders aggregated records into a Slack message."""

from datetime import date
from typing import Any, Dict, List, Literal, Mapping, Optional, Sequence, Tuple

from core.contracts.schedule_page import DeliveryRequest
from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.agents.aggregator_agent import is_full_day
from pipelines.who_is_out.config import DEFAULT_FULL_DAY_THRESHOLD, RunConfig
from pipelines.who_is_out.models import AggregatedEntry
from pipelines.who_is_out.utils.helpers import day_label, format_hours, join_clauses

logger = get_logger(__name__)

NO_ONE_OUT_TODAY = "_No support team members marked out today._"
NO_ONE_OUT_DAY = "No one out"


def _selection_suffix(status: Optional[str], counter: Optional[Tuple[int, int]]) -> str:
    if counter:
        return f" | Selected {counter[0]}/{counter[1]}"
    if status:
        return f" | Selection {status}"
    return ""


def build_daily_text(
    entries: Sequence[AggregatedEntry],
    threshold: float = DEFAULT_FULL_DAY_THRESHOLD,
) -> Optional[str]:
    """
    One-line daily announcement, or None when nobody is out.

        @channel Jane Doe is out today, and John Roe is out 4 hours today.
    """
    if not entries:
        return None
    clauses = [
        f"{e.person_name} is out today"
        if is_full_day(e.total_hours, threshold)
        else f"{e.person_name} is out {format_hours(e.total_hours)} hours today"
        for e in entries
    ]
    return f"@channel {join_clauses(clauses)}."


def build_daily_message(
    business_date: date,
    entries: Sequence[AggregatedEntry],
    threshold: float = DEFAULT_FULL_DAY_THRESHOLD,
    selection_status: Optional[str] = None,
    selection_counter: Optional[Tuple[int, int]] = None,
) -> str:
    header = f"*Who is out* ({business_date.isoformat()}){_selection_suffix(selection_status, selection_counter)}"
    body = build_daily_text(entries, threshold) or NO_ONE_OUT_TODAY
    return f"{header}\n{body}"


def build_day_block(day: date, entries: Sequence[AggregatedEntry]) -> str:
    """Weekly block for one day: label line then one line per person."""
    if not entries:
        return f"{day_label(day)}\n{NO_ONE_OUT_DAY}"
    lines = [
        f"{e.person_name}: {format_hours(e.total_hours)}h ({e.dominant_category.value})"
        for e in entries
    ]
    return f"{day_label(day)}\n" + "\n".join(lines)


def build_weekly_message(
    by_date: Mapping[date, Sequence[AggregatedEntry]],
    dates: Sequence[date],
) -> str:
    ordered = sorted(dates)
    title = "*Support coverage this week*"
    if ordered:
        title += f" ({day_label(ordered[0])} - {day_label(ordered[-1])})"
    blocks = [build_day_block(day, by_date.get(day, [])) for day in ordered]
    return "\n\n".join([title] + blocks)


class PresenterAgent(BaseAgent):
    """
    Agent that turns the aggregated record set into a DeliveryRequest.

    Input: aggregated_entries, aggregated_by_date, target_dates, run_config,
           selection_status, selection_counter
    Output: message_text, delivery_request
    """

    def __init__(self, mode: Literal["daily", "weekly"] = "daily") -> None:
        super().__init__(name="PresenterAgent")
        self.mode = mode

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        config: RunConfig = input_data.get("run_config") or RunConfig()
        target_dates: List[date] = list(input_data.get("target_dates") or [])

        if self.mode == "weekly":
            text = build_weekly_message(input_data.get("aggregated_by_date", {}), target_dates)
        else:
            text = build_daily_message(
                self.require(input_data, "target_dates")[0],
                input_data.get("aggregated_entries", []),
                threshold=config.full_day_threshold,
                selection_status=input_data.get("selection_status"),
                selection_counter=input_data.get("selection_counter"),
            )

        logger.info(f"Rendered {self.mode} message ({len(text)} chars)")
        return {
            "message_text": text,
            "delivery_request": DeliveryRequest(channel_id=config.channel_id, text=text),
        }
