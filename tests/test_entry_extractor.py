"""
Tests for EntryExtractorAgent.

Tests verify:
- Only time-off blocks are collected
- Blank-name filler rows are skipped
- Style hints come from the class attribute
- Transient row failures are retried
"""

from unittest.mock import patch

from fixtures.sample_schedule import (
    WEDNESDAY_COLUMN,
    FakeRow,
    FakeSchedulePage,
    FlakyRow,
    block,
    generate_sample_rows,
)
from pipelines.who_is_out.agents.entry_extractor_agent import (
    EntryExtractorAgent,
    extract,
    extract_row,
    has_time_off_signal,
    style_hint_from_attr,
)
from pipelines.who_is_out.models import StyleHint


class TestTimeOffSignal:
    """Tests for has_time_off_signal()."""

    def test_category_keywords(self):
        assert has_time_off_signal("8.00 PTO")
        assert has_time_off_signal("Sick 4")
        assert has_time_off_signal("Vacation")
        assert has_time_off_signal("Paid Time Off 8")

    def test_generic_out_words(self):
        assert has_time_off_signal("Out")
        assert has_time_off_signal("Day off")
        assert has_time_off_signal("Unavailable")

    def test_regular_shift_has_no_signal(self):
        assert not has_time_off_signal("9:00a - 5:00p Support")
        assert not has_time_off_signal("Back office")


class TestStyleHint:
    """Tests for style_hint_from_attr()."""

    def test_published(self):
        assert style_hint_from_attr("timeOff published") == StyleHint.PUBLISHED

    def test_unpublished_wins_over_substring(self):
        assert style_hint_from_attr("timeOff unpublished") == StyleHint.UNPUBLISHED

    def test_unknown(self):
        assert style_hint_from_attr("timeOff") == StyleHint.UNKNOWN
        assert style_hint_from_attr(None) == StyleHint.UNKNOWN


class TestExtract:
    """Tests for extract_row() and extract()."""

    def test_row_blocks_are_collected_per_column(self):
        row = FakeRow("Jane Doe", {
            2: [block("8.00 PTO")],
            WEDNESDAY_COLUMN: [block("4.00 Sick"), block("4.00 PTO")],
        })

        blocks = extract_row(row)

        assert [(b.column_index, b.raw_text) for b in blocks] == [
            (2, "8.00 PTO"),
            (3, "4.00 Sick"),
            (3, "4.00 PTO"),
        ]
        assert all(b.person_name == "Jane Doe" for b in blocks)

    def test_whitespace_is_collapsed(self):
        row = FakeRow("  Jane\n Doe ", {0: [block("8.00\n  PTO")]})
        blocks = extract_row(row)
        assert blocks[0].person_name == "Jane Doe"
        assert blocks[0].raw_text == "8.00 PTO"

    def test_blank_name_row_is_skipped(self):
        row = FakeRow("   ", {0: [block("8.00 PTO")]})
        assert extract_row(row) == []
        assert row.reads == 0

    def test_empty_and_shift_blocks_are_skipped(self):
        row = FakeRow("John Roe", {1: [block(""), block("9:00a - 5:00p Support")]})
        assert extract_row(row) == []

    def test_sample_grid(self):
        blocks = extract(generate_sample_rows())
        people = sorted({b.person_name for b in blocks})
        assert people == ["Alex Stranger", "Jane Doe", "John Roe"]
        assert len(blocks) == 4


class TestEntryExtractorAgent:
    """Tests for EntryExtractorAgent.run()."""

    def test_outputs_blocks_and_stats(self):
        page = FakeSchedulePage(rows=generate_sample_rows())

        result = EntryExtractorAgent().run({"schedule_page": page})

        assert len(result["raw_blocks"]) == 4
        assert result["extraction_stats"] == {"rows": 4, "blocks": 4, "people": 3}

    def test_transient_row_failure_is_retried(self):
        row = FlakyRow("Jane Doe", {0: [block("8 PTO")]}, failures=1)
        page = FakeSchedulePage(rows=[row])

        with patch("pipelines.who_is_out.agents.entry_extractor_agent.PAGE_CALL_BACKOFF_SECONDS", 0):
            result = EntryExtractorAgent().run({"schedule_page": page})

        assert [b.raw_text for b in result["raw_blocks"]] == ["8 PTO"]
