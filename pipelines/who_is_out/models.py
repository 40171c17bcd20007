"""
Record types flowing through the Who-Is-Out pipeline.

    RawBlock → ClassifiedEntry → AggregatedEntry

All records are immutable and live only for one run.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Mapping, Optional


# =============================================================================
# ENUMERATIONS
# =============================================================================

class StyleHint(str, Enum):
    """Approval signal read from a block's CSS class attribute."""
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"
    UNKNOWN = "unknown"


class Category(str, Enum):
    """Time-off category of a single block."""
    PTO = "PTO"
    SICK = "Sick"
    VACATION = "Vacation"
    HOLIDAY = "Holiday"
    TIME_OFF = "Time Off"
    OUT = "Out"


class DominantCategory(str, Enum):
    """Single-line label for a person's day."""
    SICK = "Sick"
    PTO = "PTO"
    PTO_SICK = "PTO+Sick"
    OUT = "Out"


class AggregationPolicy(str, Enum):
    """How same-person same-day hours combine into total_hours."""
    SUM = "sum"
    MAX = "max"


# Categories reported collectively as "PTO"
PTO_FAMILY = frozenset([Category.PTO, Category.VACATION, Category.HOLIDAY, Category.TIME_OFF])


# =============================================================================
# RECORDS
# =============================================================================

@dataclass(frozen=True)
class RawBlock:
    """One scraped visual unit, before parsing."""
    person_name: str
    column_index: int
    raw_text: str
    style_hint: StyleHint = StyleHint.UNKNOWN


@dataclass(frozen=True)
class DateColumnMap:
    """
    Column index → business date for the visible week.

    Columns whose header failed to parse are absent from `columns` and kept
    in `unparsed` with their raw label.
    """
    columns: Mapping[int, date] = field(default_factory=dict)
    unparsed: Mapping[int, str] = field(default_factory=dict)

    def date_for(self, column_index: int) -> Optional[date]:
        return self.columns.get(column_index)

    def dates(self) -> list[date]:
        return [self.columns[i] for i in sorted(self.columns)]


@dataclass(frozen=True)
class ClassifiedEntry:
    """A RawBlock that parsed to a positive number of hours."""
    person_name: str
    business_date: date
    hours: float
    category: Category
    approved: Optional[bool] = None
    raw_text: str = ""


@dataclass(frozen=True)
class AggregatedEntry:
    """One person, one business date, all blocks merged."""
    person_name: str
    business_date: date
    total_hours: float
    category_breakdown: Dict[Category, float]
    dominant_category: DominantCategory
