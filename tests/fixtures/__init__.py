"""
Fixtures package for pipeline testing.

Provides in-memory page, clock and messaging doubles.
"""

from fixtures.sample_schedule import (
    SAMPLE_HEADER_LABELS,
    SAMPLE_WEEK_SUNDAY,
    WEDNESDAY_COLUMN,
    FakeClock,
    FakeRow,
    FakeSchedulePage,
    FlakyRow,
    RecordingClient,
    block,
    generate_sample_rows,
)

__all__ = [
    "SAMPLE_HEADER_LABELS",
    "SAMPLE_WEEK_SUNDAY",
    "WEDNESDAY_COLUMN",
    "FakeClock",
    "FakeRow",
    "FakeSchedulePage",
    "FlakyRow",
    "RecordingClient",
    "block",
    "generate_sample_rows",
]
