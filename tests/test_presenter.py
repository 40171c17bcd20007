"""
Tests for PresenterAgent message rendering.

Tests verify:
- Daily announcement wording (full-day vs partial hours)
- Empty-day message
- Weekly title and per-day blocks
- DeliveryRequest addressed to the configured channel
"""

from datetime import date

from pipelines.who_is_out.agents.presenter_agent import (
    NO_ONE_OUT_TODAY,
    PresenterAgent,
    build_daily_message,
    build_daily_text,
    build_weekly_message,
)
from pipelines.who_is_out.config import RunConfig
from pipelines.who_is_out.models import AggregatedEntry, Category, DominantCategory
from pipelines.who_is_out.utils import format_hours, join_clauses

WED = date(2026, 2, 25)


def _agg(name, hours, dominant=DominantCategory.PTO, day=WED):
    return AggregatedEntry(
        person_name=name,
        business_date=day,
        total_hours=hours,
        category_breakdown={Category.PTO: hours},
        dominant_category=dominant,
    )


class TestHelpers:
    """Tests for shared formatting helpers."""

    def test_format_hours_strips_zeros(self):
        assert format_hours(8.0) == "8"
        assert format_hours(4.50) == "4.5"
        assert format_hours(None) == "0"

    def test_join_clauses(self):
        assert join_clauses(["a"]) == "a"
        assert join_clauses(["a", "b"]) == "a, and b"
        assert join_clauses(["a", "b", "c"]) == "a, b, and c"
        assert join_clauses([]) == ""


class TestDailyMessage:
    """Tests for the daily message."""

    def test_full_and_partial_day(self):
        text = build_daily_text([_agg("Jane Doe", 8.0), _agg("John Roe", 4.0)])
        assert text == "@channel Jane Doe is out today, and John Roe is out 4 hours today."

    def test_single_person(self):
        assert build_daily_text([_agg("Jane Doe", 7.99)]) == "@channel Jane Doe is out today."

    def test_nobody_out(self):
        assert build_daily_text([]) is None
        message = build_daily_message(WED, [])
        assert message == f"*Who is out* (2026-02-25)\n{NO_ONE_OUT_TODAY}"

    def test_header_shows_selection_counter(self):
        message = build_daily_message(WED, [_agg("Jane Doe", 8.0)], selection_counter=(39, 39))
        assert message.splitlines()[0] == "*Who is out* (2026-02-25) | Selected 39/39"

    def test_header_falls_back_to_status_text(self):
        message = build_daily_message(WED, [], selection_status="100%")
        assert message.startswith("*Who is out* (2026-02-25) | Selection 100%")


class TestWeeklyMessage:
    """Tests for the weekly message."""

    def test_blocks_per_day(self):
        mon, tue = date(2026, 2, 23), date(2026, 2, 24)
        by_date = {
            mon: [],
            tue: [_agg("Jane Doe", 8.0, DominantCategory.PTO_SICK, day=tue), _agg("John Roe", 4.5, day=tue)],
        }

        text = build_weekly_message(by_date, [tue, mon])

        assert text == (
            "*Support coverage this week* (Monday 2/23 - Tuesday 2/24)\n\n"
            "Monday 2/23\nNo one out\n\n"
            "Tuesday 2/24\nJane Doe: 8h (PTO+Sick)\nJohn Roe: 4.5h (PTO)"
        )


class TestPresenterAgent:
    """Tests for PresenterAgent.run()."""

    def test_daily_request_uses_channel(self):
        result = PresenterAgent(mode="daily").run({
            "aggregated_entries": [_agg("Jane Doe", 8.0)],
            "target_dates": [WED],
            "run_config": RunConfig(channel_id="C123"),
            "selection_counter": (39, 39),
        })

        request = result["delivery_request"]
        assert request.channel_id == "C123"
        assert request.text == result["message_text"]
        assert "@channel Jane Doe is out today." in request.text

    def test_weekly_mode(self):
        result = PresenterAgent(mode="weekly").run({
            "aggregated_by_date": {WED: [_agg("Jane Doe", 8.0)]},
            "target_dates": [WED],
            "run_config": RunConfig(),
        })
        assert result["message_text"].startswith("*Support coverage this week* (Wednesday 2/25 - Wednesday 2/25)")
        assert "Jane Doe: 8h (PTO)" in result["message_text"]
