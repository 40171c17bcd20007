"""Helper utilities for the Who-Is-Out pipeline."""

import re
from datetime import date
from typing import Optional, Sequence


def format_hours(hours: Optional[float]) -> str:
    """
    Format an hour count for display, dropping trailing zeros.

    Examples:
        >>> format_hours(8.0)
        '8'
        >>> format_hours(4.5)
        '4.5'
        >>> format_hours(2.333)
        '2.33'
        >>> format_hours(None)
        '0'
    """
    rounded = round(float(hours or 0), 2)
    text = f"{rounded:.2f}".rstrip("0").rstrip(".")
    return text or "0"


def join_clauses(clauses: Sequence[str]) -> str:
    """
    Join clauses as "a", "a, and b", "a, b, and c".

    Matches the wording the channel has always received, including the
    comma before "and" for two clauses.
    """
    if not clauses:
        return ""
    if len(clauses) == 1:
        return clauses[0]
    return f"{', '.join(clauses[:-1])}, and {clauses[-1]}"


def day_label(day: date) -> str:
    """Long weekday plus month/day, e.g. "Monday 2/23"."""
    return f"{day.strftime('%A')} {day.month}/{day.day}"


def collapse_whitespace(text: Optional[str]) -> str:
    """Collapse whitespace runs (including newlines) into single spaces."""
    return re.sub(r"\s+", " ", text or "").strip()
