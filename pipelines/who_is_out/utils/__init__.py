"""Utility functions for the Who-Is-Out pipeline."""

from pipelines.who_is_out.utils.helpers import (
    collapse_whitespace,
    day_label,
    format_hours,
    join_clauses,
)

__all__ = ["collapse_whitespace", "day_label", "format_hours", "join_clauses"]
