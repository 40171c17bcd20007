"""
End-to-end tests for the Who-Is-Out pipeline.

Runs every stage against an in-memory schedule page:
- Readiness sequence 0 / 0 → 0 / 39 → 39 / 39
- Jane Doe 4h Sick + 4h PTO on Wednesday → 8h PTO+Sick, full day
- Off-roster and filler rows dropped
- Weekly coverage blocks
- Typed failures reach the caller; nothing is delivered
"""

from datetime import date, datetime, timezone

import pytest

from core.contracts.schedule_page import DeliveryResult
from core.errors import DateNotInVisibleWindow, DeliveryFailure, ReadinessTimeout
from core.tools.slack_tool import SlackClient
from fixtures.sample_schedule import FakeSchedulePage, RecordingClient, generate_sample_rows
from pipelines.who_is_out.config import RunConfig
from pipelines.who_is_out.models import DominantCategory
from pipelines.who_is_out.pipeline import run_report

WED = date(2026, 2, 25)


def _config(**overrides) -> RunConfig:
    values = dict(
        target_date=WED,
        roster_names=("Jane Doe", "John Roe"),
        readiness_timeout=5,
        readiness_poll_interval=0.001,
        channel_id="C123",
        fallback_channel_id="CTEST",
    )
    values.update(overrides)
    return RunConfig(**values)


def _page(**overrides) -> FakeSchedulePage:
    values = dict(rows=generate_sample_rows(), counter_sequence=["0 / 0", "0 / 39", "39 / 39"])
    values.update(overrides)
    return FakeSchedulePage(**values)


class TestDailyRun:
    """Daily mode, all stages."""

    def test_partial_blocks_become_full_day(self):
        client = SlackClient(token="", mock=True)

        result = run_report(_page(), _config(), mode="daily", slack_client=client)

        entries = result["aggregated_entries"]
        assert [e.person_name for e in entries] == ["Jane Doe", "John Roe"]

        jane = entries[0]
        assert jane.business_date == WED
        assert jane.total_hours == 8.0
        assert jane.dominant_category == DominantCategory.PTO_SICK

        assert result["selection_status"] == "39 / 39"
        assert result["message_text"] == (
            "*Who is out* (2026-02-25) | Selected 39/39\n"
            "@channel Jane Doe is out today, and John Roe is out 4 hours today."
        )
        assert [r.channel_id for r in client.sent] == ["C123"]
        assert result["delivery_status"]["ok"] is True

    def test_sum_and_max_policies_differ_only_in_total(self):
        by_policy = {}
        for policy in ("sum", "max"):
            result = run_report(_page(), _config(aggregation_policy=policy), dry_run=True)
            by_policy[policy] = result["aggregated_entries"][0]

        assert by_policy["sum"].total_hours == 8.0
        assert by_policy["max"].total_hours == 4.0
        assert by_policy["sum"].category_breakdown == by_policy["max"].category_breakdown

    def test_empty_roster_keeps_everyone(self):
        result = run_report(_page(), _config(roster_names=()), dry_run=True)
        names = [e.person_name for e in result["aggregated_entries"]]
        assert names == ["Alex Stranger", "Jane Doe", "John Roe"]

    def test_nobody_out(self):
        result = run_report(_page(rows=[]), _config(), dry_run=True)
        assert result["aggregated_entries"] == []
        assert result["message_text"].endswith("_No support team members marked out today._")

    def test_dry_run_sends_nothing(self):
        client = RecordingClient()
        result = run_report(_page(), _config(), slack_client=client, dry_run=True)
        assert client.requests == []
        assert "delivery_status" not in result


class TestWeeklyRun:
    """Weekly mode, all stages."""

    def test_week_blocks(self):
        now = datetime(2026, 2, 25, 18, 0, tzinfo=timezone.utc)
        client = RecordingClient()

        result = run_report(_page(), _config(target_date=None), mode="weekly", slack_client=client, now=now)

        text = result["message_text"]
        assert text.startswith("*Support coverage this week* (Monday 2/23 - Friday 2/27)")
        assert "Monday 2/23\nNo one out" in text
        assert "Wednesday 2/25\nJane Doe: 8h (PTO+Sick)\nJohn Roe: 4h (PTO)" in text
        assert "Friday 2/27\nNo one out" in text
        assert len(client.requests) == 1


class TestFailures:
    """Typed failures abort the run."""

    def test_readiness_timeout(self):
        page = _page(counter_sequence=["0 / 0"])
        client = RecordingClient()

        with pytest.raises(ReadinessTimeout) as exc_info:
            run_report(page, _config(readiness_timeout=0.01), slack_client=client)

        assert exc_info.value.last_value == "0 / 0"
        assert client.requests == []

    def test_date_not_visible(self):
        with pytest.raises(DateNotInVisibleWindow):
            run_report(_page(), _config(target_date=date(2026, 3, 3)), dry_run=True)

    def test_delivery_failure_notifies_fallback(self):
        client = RecordingClient(results=[DeliveryResult(ok=False, error_code="not_in_channel")])

        with pytest.raises(DeliveryFailure):
            run_report(_page(), _config(), slack_client=client)

        assert [r.channel_id for r in client.requests] == ["C123", "CTEST"]
