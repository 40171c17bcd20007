"""
Entry Classifier Agent for the Who-Is-Out pipeline.

Turns the free text of a scraped block ("8.00 PTO", "Sick 4", "Out") into
hours and a category. There is no grammar upstream, so every keyword and
numeral rule lives here where it can be tested against literal fixtures.

CRITICAL INVARIANTS:
- Keyword lookup only, first match wins (see CATEGORY_RULES order)
- Deterministic (same text → same result)
- Permissive: any time-off word with positive hours is kept
- Zero-hour and unrecognized blocks are dropped here, never carried forward

Integration Position:
    EntryExtractorAgent
            ↓
    EntryClassifierAgent      ← THIS AGENT
            ↓
    RosterFilterAgent
"""

import math
import re
from typing import Any, Dict, List, NamedTuple, Optional, Sequence, Tuple

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.agents.entry_extractor_agent import GENERIC_OUT_RE
from pipelines.who_is_out.config import DEFAULT_FULL_DAY_HOURS
from pipelines.who_is_out.models import (
    Category,
    ClassifiedEntry,
    DateColumnMap,
    RawBlock,
    StyleHint,
)

logger = get_logger(__name__)


# =============================================================================
# CLASSIFICATION RULES
# =============================================================================

# Ordered (category, lowercase substrings). "paid time off" must be tested
# before "time off".
CATEGORY_RULES: Tuple[Tuple[Category, Tuple[str, ...]], ...] = (
    (Category.SICK, ("sick",)),
    (Category.PTO, ("pto", "paid time off")),
    (Category.VACATION, ("vacat",)),
    (Category.HOLIDAY, ("holiday",)),
    (Category.TIME_OFF, ("time off", "unavailable")),
)

# "Time-Off" and "Paid-Time-Off" match their spaced needles
HYPHEN_RE = re.compile(r"\s*-\s*")

# Integers, decimals, and bare ".5"
NUMERAL_RE = re.compile(r"\d+(?:\.\d+)?|\.\d+")

APPROVAL_BY_HINT = {
    StyleHint.PUBLISHED: True,
    StyleHint.UNPUBLISHED: False,
    StyleHint.UNKNOWN: None,
}


class Classification(NamedTuple):
    """Parsed hours and category of one block."""
    hours: float
    category: Category


def detect_category(text: str) -> Optional[Category]:
    """
    Category of a block's text, or None when it does not look like time off.

    Falls back to Category.OUT when only a generic out/off word is present.
    """
    lowered = HYPHEN_RE.sub(" ", text.lower())
    for category, needles in CATEGORY_RULES:
        if any(needle in lowered for needle in needles):
            return category
    if GENERIC_OUT_RE.search(text):
        return Category.OUT
    return None


def extract_hours(text: str, default: float = DEFAULT_FULL_DAY_HOURS) -> float:
    """
    Hours figure of a block: the largest numeral present.

    A smaller stray number (e.g. a day-of-month fragment) can bleed into the
    block text; the hours figure is the larger one in this UI. With no
    numeral at all the block counts as a full day.
    """
    values = [float(token) for token in NUMERAL_RE.findall(text)]
    if not values:
        return default
    return max(values)


def classify(raw_text: str, default_hours: float = DEFAULT_FULL_DAY_HOURS) -> Optional[Classification]:
    """
    Classify free text into (hours, category).

    Args:
        raw_text: Block text as scraped.
        default_hours: Hours used when the text holds no numeral.

    Returns:
        Classification, or None (discard) when the text carries no time-off
        signal or the hours are not a finite positive number.
    """
    text = raw_text or ""
    category = detect_category(text)
    if category is None:
        return None

    hours = extract_hours(text, default_hours)
    if not math.isfinite(hours) or hours <= 0:
        return None

    return Classification(hours=hours, category=category)


def classify_block(block: RawBlock, column_map: DateColumnMap) -> Optional[ClassifiedEntry]:
    """
    Classify one RawBlock against the column map.

    Returns None when the block's column has no date (never reassigned to a
    neighbouring column) or when the text is discarded.
    """
    business_date = column_map.date_for(block.column_index)
    if business_date is None:
        return None

    result = classify(block.raw_text)
    if result is None:
        return None

    return ClassifiedEntry(
        person_name=block.person_name,
        business_date=business_date,
        hours=result.hours,
        category=result.category,
        approved=APPROVAL_BY_HINT[block.style_hint],
        raw_text=block.raw_text,
    )


# =============================================================================
# AGENT
# =============================================================================

class EntryClassifierAgent(BaseAgent):
    """
    Agent that classifies raw blocks into typed entries.

    Input: raw_blocks, column_map, target_dates (optional window filter)
    Output: classified_entries, classification_stats
    """

    def __init__(self) -> None:
        """Initialize the entry classifier."""
        super().__init__(name="EntryClassifierAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        raw_blocks: Sequence[RawBlock] = input_data.get("raw_blocks", [])
        column_map: DateColumnMap = input_data.get("column_map") or DateColumnMap()
        target_dates = input_data.get("target_dates")
        window = set(target_dates) if target_dates else None

        stats = {
            "total": len(raw_blocks),
            "classified": 0,
            "discarded": 0,
            "unmapped_column": 0,
            "outside_window": 0,
        }
        entries: List[ClassifiedEntry] = []

        for block in raw_blocks:
            if column_map.date_for(block.column_index) is None:
                stats["unmapped_column"] += 1
                logger.warning(
                    f"Dropping block for {block.person_name!r} in column {block.column_index}: "
                    f"header {column_map.unparsed.get(block.column_index, '(missing)')!r} has no date"
                )
                continue

            entry = classify_block(block, column_map)
            if entry is None:
                stats["discarded"] += 1
                logger.debug(f"Discarded block {block.raw_text!r} ({block.person_name})")
                continue

            if window is not None and entry.business_date not in window:
                stats["outside_window"] += 1
                continue

            entries.append(entry)
            stats["classified"] += 1

        logger.info(
            f"Classification complete: {stats['total']} blocks, "
            f"{stats['classified']} classified, "
            f"{stats['discarded']} discarded, "
            f"{stats['unmapped_column']} unmapped, "
            f"{stats['outside_window']} outside window"
        )

        return {"classified_entries": entries, "classification_stats": stats}
