"""
Entry Extractor Agent for the Who-Is-Out pipeline.

Walks the rendered week grid row by row and collects every block that
looks like time off as a RawBlock. Read-only: nothing on the page changes.

Integration Position:
    DateReconcilerAgent
            ↓
    EntryExtractorAgent       ← THIS AGENT
            ↓
    EntryClassifierAgent
"""

import re
from typing import Any, Dict, Iterable, List

from core.contracts.schedule_page import RowHandle, SchedulePage
from core.logger import get_logger
from core.retry import call_with_retry
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.config import (
    GRID_COLUMN_COUNT,
    PAGE_CALL_ATTEMPTS,
    PAGE_CALL_BACKOFF_SECONDS,
)
from pipelines.who_is_out.models import RawBlock, StyleHint
from pipelines.who_is_out.utils.helpers import collapse_whitespace

logger = get_logger(__name__)


# =============================================================================
# TIME-OFF SIGNAL
# =============================================================================

# Category keywords (substring, case-insensitive)
CATEGORY_KEYWORD_RE = re.compile(r"sick|pto|paid time off|vacation|holiday|time off", re.IGNORECASE)

# Generic "not working" words (whole words only, so "office" is not "off")
GENERIC_OUT_RE = re.compile(r"\b(?:out|off|unavailable)\b", re.IGNORECASE)


def has_time_off_signal(text: str) -> bool:
    """True when text carries a category keyword or an out/off word."""
    return bool(CATEGORY_KEYWORD_RE.search(text) or GENERIC_OUT_RE.search(text))


def style_hint_from_attr(style_attr: str | None) -> StyleHint:
    """
    Derive the approval hint from a block's class attribute.

    "unpublished" is checked first because it contains "published".
    """
    classes = (style_attr or "").lower()
    if "unpublished" in classes:
        return StyleHint.UNPUBLISHED
    if "published" in classes:
        return StyleHint.PUBLISHED
    return StyleHint.UNKNOWN


# =============================================================================
# EXTRACTION
# =============================================================================

def extract_row(row: RowHandle, column_count: int = GRID_COLUMN_COUNT) -> List[RawBlock]:
    """
    Collect time-off blocks from a single row.

    Blank-name rows are filler and yield nothing.
    """
    name = collapse_whitespace(row.name())
    if not name:
        return []

    blocks: List[RawBlock] = []
    for column_index in range(column_count):
        for snapshot in row.blocks_for_column(column_index) or []:
            text = collapse_whitespace(snapshot.get("text"))
            if not text or not has_time_off_signal(text):
                continue
            blocks.append(RawBlock(
                person_name=name,
                column_index=column_index,
                raw_text=text,
                style_hint=style_hint_from_attr(snapshot.get("style_attr")),
            ))
    return blocks


def extract(rows: Iterable[RowHandle], column_count: int = GRID_COLUMN_COUNT) -> List[RawBlock]:
    """
    Collect time-off blocks from every row of the grid.

    Args:
        rows: Row handles in rendered order.
        column_count: Day columns per row.

    Returns:
        RawBlocks in row, column, block order.
    """
    blocks: List[RawBlock] = []
    for row in rows:
        blocks.extend(extract_row(row, column_count))
    return blocks


class EntryExtractorAgent(BaseAgent):
    """
    Agent that scrapes raw time-off blocks from the week grid.

    Input: schedule_page
    Output: raw_blocks (list of RawBlock), extraction_stats
    """

    def __init__(self, column_count: int = GRID_COLUMN_COUNT) -> None:
        """Initialize the entry extractor."""
        super().__init__(name="EntryExtractorAgent")
        self.column_count = column_count

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        page: SchedulePage = self.require(input_data, "schedule_page")

        rows = call_with_retry(
            page.get_rows,
            attempts=PAGE_CALL_ATTEMPTS,
            backoff_seconds=PAGE_CALL_BACKOFF_SECONDS,
            description="get_rows",
        )

        raw_blocks: List[RawBlock] = []
        for row in rows:
            raw_blocks.extend(call_with_retry(
                lambda row=row: extract_row(row, self.column_count),
                attempts=PAGE_CALL_ATTEMPTS,
                backoff_seconds=PAGE_CALL_BACKOFF_SECONDS,
                description="read row",
            ))

        people = {block.person_name for block in raw_blocks}
        logger.info(f"Extracted {len(raw_blocks)} time-off block(s) for {len(people)} person(s) from {len(rows)} row(s)")

        return {
            "raw_blocks": raw_blocks,
            "extraction_stats": {"rows": len(rows), "blocks": len(raw_blocks), "people": len(people)},
        }
