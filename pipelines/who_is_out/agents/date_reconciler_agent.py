"""
Date Reconciler Agent for the Who-Is-Out pipeline.

Maps the free-text day labels of the rendered week header ("Feb 22, 2026",
"Mon 2/23/2026", "Sunday 2/22") onto canonical business dates, and resolves
which columns the requested report dates live in.

Business dates are always computed in one named time zone, never from the
host's local clock, so a runner in UTC does not drift a day off Denver.

Integration Position:
    SelectionReadinessAgent
            ↓
    DateReconcilerAgent       ← THIS AGENT
            ↓
    EntryExtractorAgent
"""

import re
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Literal, Optional, Sequence, Union
from zoneinfo import ZoneInfo

from dateutil import parser as dateparser

from core.contracts.schedule_page import SchedulePage
from core.errors import DateNotInVisibleWindow
from core.logger import get_logger
from core.retry import call_with_retry
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.config import (
    DEFAULT_TIMEZONE,
    PAGE_CALL_ATTEMPTS,
    PAGE_CALL_BACKOFF_SECONDS,
    WORKWEEK_DAYS,
    RunConfig,
    parse_ymd,
)
from pipelines.who_is_out.models import DateColumnMap

logger = get_logger(__name__)

ReportMode = Literal["daily", "weekly"]

# A yearless label more than this far from the reference date belongs to
# the adjacent year (a Dec/Jan week).
YEAR_ROLLOVER_DAYS = 183

_DIGIT_RE = re.compile(r"\d")


# =============================================================================
# BUSINESS DATE HELPERS
# =============================================================================

def business_date_today(tz_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> date:
    """
    Current calendar date in the named zone.

    Args:
        tz_name: IANA zone name (e.g. "America/Denver").
        now: Aware datetime to convert instead of the current instant.
            A naive value is taken as UTC.

    Returns:
        The business date.
    """
    tz = ZoneInfo(tz_name)
    if now is None:
        return datetime.now(tz).date()
    if now.tzinfo is None:
        now = now.replace(tzinfo=ZoneInfo("UTC"))
    return now.astimezone(tz).date()


def resolve_target_date(
    override: Optional[Union[str, date]],
    tz_name: str = DEFAULT_TIMEZONE,
    now: Optional[datetime] = None,
) -> date:
    """
    The report date: an explicit override, else business today.

    Raises:
        ValueError: If a string override is not YYYY-MM-DD.
    """
    if isinstance(override, date):
        return override
    return parse_ymd(override, "DATE_YMD") or business_date_today(tz_name, now)


def week_start_for(day: date) -> date:
    """
    Monday of the Sunday..Saturday grid week containing `day`.

    A Sunday belongs to the week it opens, so it maps to the next day.
    """
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    return sunday + timedelta(days=1)


def week_dates(week_start: date, days: int = WORKWEEK_DAYS) -> List[date]:
    """Consecutive dates starting at week_start (Mon..Fri by default)."""
    return [week_start + timedelta(days=offset) for offset in range(days)]


# =============================================================================
# HEADER PARSING
# =============================================================================

def _has_explicit_year(label: str) -> bool:
    return bool(re.search(r"\b\d{4}\b", label)) or bool(re.search(r"\d{1,2}/\d{1,2}/\d{2}\b", label))


def parse_header_label(label: Optional[str], reference: Optional[date] = None) -> Optional[date]:
    """
    Parse one header label into a calendar date.

    Tolerates weekday prefixes, month names or numeric month/day forms, and
    missing years (the reference date's year is used, adjusted across a
    year boundary).

    Args:
        label: Raw header text.
        reference: Date used to fill a missing year.

    Returns:
        The date, or None when the label is not a date.
    """
    text = (label or "").strip()
    if not text or not _DIGIT_RE.search(text):
        return None

    reference = reference or date.today()
    default = datetime(reference.year, reference.month, 1)

    try:
        parsed = dateparser.parse(text, fuzzy=True, default=default).date()
    except (ValueError, OverflowError):
        return None

    if not _has_explicit_year(text):
        delta = (parsed - reference).days
        if delta > YEAR_ROLLOVER_DAYS:
            parsed = parsed.replace(year=parsed.year - 1)
        elif delta < -YEAR_ROLLOVER_DAYS:
            parsed = parsed.replace(year=parsed.year + 1)

    return parsed


def build_column_map(header_labels: Sequence[str], reference: Optional[date] = None) -> DateColumnMap:
    """
    Build the column → business date map for the visible week.

    A label that fails to parse leaves its column unmapped (kept in
    `unparsed` for diagnostics) instead of failing the whole map.

    Args:
        header_labels: Day labels in column order.
        reference: Date used to fill missing years.

    Returns:
        DateColumnMap, possibly partial.
    """
    columns: Dict[int, date] = {}
    unparsed: Dict[int, str] = {}

    for index, label in enumerate(header_labels):
        parsed = parse_header_label(label, reference)
        if parsed is None:
            logger.warning(f"Unparseable header label in column {index}: {label!r}")
            unparsed[index] = label
        else:
            columns[index] = parsed

    return DateColumnMap(columns=columns, unparsed=unparsed)


def column_for_date(column_map: DateColumnMap, target: date) -> int:
    """
    Find the column showing `target`.

    Raises:
        DateNotInVisibleWindow: The date is not in the rendered week.
    """
    for index in sorted(column_map.columns):
        if column_map.columns[index] == target:
            return index
    raise DateNotInVisibleWindow(target, column_map.dates())


# =============================================================================
# AGENT
# =============================================================================

class DateReconcilerAgent(BaseAgent):
    """
    Agent that reads header labels and resolves report dates to columns.

    Daily mode resolves one date (run_config.target_date, else today in the
    business zone). Weekly mode resolves Monday..Friday of the week starting
    at run_config.week_start (else the Sunday..Saturday week holding today).

    Input: schedule_page, run_config
    Output: header_labels, column_map, business_today, target_dates,
            target_columns (date → column index)

    Raises:
        DateNotInVisibleWindow: A requested date has no column.
    """

    def __init__(self, mode: ReportMode = "daily", now: Optional[datetime] = None) -> None:
        """
        Initialize the date reconciler.

        Args:
            mode: "daily" or "weekly".
            now: Fixed instant for "today" (tests); None means the real clock.
        """
        super().__init__(name="DateReconcilerAgent")
        self.mode = mode
        self.now = now

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        page: SchedulePage = self.require(input_data, "schedule_page")
        config: RunConfig = input_data.get("run_config") or RunConfig()

        today = business_date_today(config.timezone, self.now)
        target_dates = self._resolve_target_dates(config, today)

        labels = call_with_retry(
            page.get_header_labels,
            attempts=PAGE_CALL_ATTEMPTS,
            backoff_seconds=PAGE_CALL_BACKOFF_SECONDS,
            description="get_header_labels",
        )
        logger.info(f"Header labels: {labels}")

        column_map = build_column_map(labels, reference=target_dates[0])
        target_columns = {day: column_for_date(column_map, day) for day in target_dates}

        logger.info(
            f"Resolved {len(target_dates)} target date(s) "
            f"({target_dates[0].isoformat()}..{target_dates[-1].isoformat()}) "
            f"to columns {list(target_columns.values())}"
        )

        return {
            "header_labels": list(labels),
            "column_map": column_map,
            "business_today": today,
            "target_dates": target_dates,
            "target_columns": target_columns,
        }

    def _resolve_target_dates(self, config: RunConfig, today: date) -> List[date]:
        if self.mode == "weekly":
            start = config.week_start or week_start_for(today)
            return week_dates(start)
        return [resolve_target_date(config.target_date, config.timezone, self.now)]
