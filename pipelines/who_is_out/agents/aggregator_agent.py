"""
Aggregator Agent for the Who-Is-Out pipeline.

Merges every classified entry of one person on one business date into a
single AggregatedEntry and orders the result for display.

Aggregation rules:
    ┌──────────────────────────────────────────────────────────────────┐
    │ step               │ rule                                        │
    ├────────────────────┼─────────────────────────────────────────────┤
    │ group key          │ (normalize_name(person), business_date)     │
    │ dedupe             │ identical raw_text inside a group counts    │
    │                    │ once (UI re-render artifact)                │
    │ category breakdown │ per-category sum of deduped entries         │
    │ total (SUM policy) │ sum of deduped entries                      │
    │ total (MAX policy) │ largest single entry                        │
    │ dominant category  │ PTO+Sick > Sick > PTO family > Out          │
    └──────────────────────────────────────────────────────────────────┘

Display order: full-day first, then hours descending, then name ascending.
"""

import math
from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.agents.roster_filter_agent import normalize_name
from pipelines.who_is_out.config import DEFAULT_FULL_DAY_THRESHOLD, RunConfig
from pipelines.who_is_out.models import (
    PTO_FAMILY,
    AggregatedEntry,
    AggregationPolicy,
    Category,
    ClassifiedEntry,
    DominantCategory,
)

logger = get_logger(__name__)

GroupKey = Tuple[str, date]


# =============================================================================
# PURE AGGREGATION FUNCTIONS
# =============================================================================

def is_full_day(total_hours: float, threshold: float = DEFAULT_FULL_DAY_THRESHOLD) -> bool:
    """Whether an absence counts as a whole day (7.99 tolerates 8h rounding)."""
    return total_hours >= threshold


def dominant_category(breakdown: Mapping[Category, float]) -> DominantCategory:
    """
    Single display label for a category breakdown.

    Sick and any PTO-family hours together give PTO+Sick; Vacation, Holiday
    and Time Off all report as PTO.
    """
    sick = breakdown.get(Category.SICK, 0) > 0
    pto = any(breakdown.get(category, 0) > 0 for category in PTO_FAMILY)
    if sick and pto:
        return DominantCategory.PTO_SICK
    if sick:
        return DominantCategory.SICK
    if pto:
        return DominantCategory.PTO
    return DominantCategory.OUT


def _dedupe_by_raw_text(entries: Iterable[ClassifiedEntry]) -> List[ClassifiedEntry]:
    unique: Dict[str, ClassifiedEntry] = {}
    for entry in entries:
        key = entry.raw_text or f"{entry.category.value}:{entry.hours}"
        unique.setdefault(key, entry)
    return list(unique.values())


def merge_group(entries: Sequence[ClassifiedEntry], policy: AggregationPolicy) -> AggregatedEntry:
    """
    Merge one person-day group into an AggregatedEntry.

    Args:
        entries: Non-empty entries sharing a group key.
        policy: SUM or MAX for total_hours.

    Returns:
        The merged entry.
    """
    unique = _dedupe_by_raw_text(entries)

    by_category: Dict[Category, List[float]] = defaultdict(list)
    for entry in unique:
        by_category[entry.category].append(entry.hours)
    # fsum is exact, so the sums do not depend on entry order
    breakdown = {category: round(math.fsum(hours), 4) for category, hours in by_category.items()}
    breakdown = {category: hours for category, hours in breakdown.items() if hours > 0}

    if policy == AggregationPolicy.MAX:
        total = max(entry.hours for entry in unique)
    else:
        total = math.fsum(entry.hours for entry in unique)

    return AggregatedEntry(
        # Smallest spelling keeps the display name independent of input order
        person_name=min(entry.person_name for entry in entries),
        business_date=entries[0].business_date,
        total_hours=round(total, 4),
        category_breakdown=breakdown,
        dominant_category=dominant_category(breakdown),
    )


def sort_for_display(
    entries: Iterable[AggregatedEntry],
    threshold: float = DEFAULT_FULL_DAY_THRESHOLD,
) -> List[AggregatedEntry]:
    """Full-day first, then total_hours descending, then person_name ascending."""
    return sorted(
        entries,
        key=lambda e: (not is_full_day(e.total_hours, threshold), -e.total_hours, e.person_name),
    )


def aggregate(
    entries: Iterable[ClassifiedEntry],
    policy: AggregationPolicy = AggregationPolicy.SUM,
    threshold: float = DEFAULT_FULL_DAY_THRESHOLD,
) -> List[AggregatedEntry]:
    """
    Merge classified entries per (normalized person, business date).

    Args:
        entries: Classified entries, any order.
        policy: SUM (distinct partial-day blocks) or MAX (duplicates).
        threshold: Full-day threshold used for ordering.

    Returns:
        AggregatedEntry list in display order, at most one per group key.
    """
    groups: Dict[GroupKey, List[ClassifiedEntry]] = defaultdict(list)
    for entry in entries:
        groups[(normalize_name(entry.person_name), entry.business_date)].append(entry)

    merged = [merge_group(group, policy) for group in groups.values()]
    return sort_for_display(merged, threshold)


def group_by_date(entries: Iterable[AggregatedEntry], dates: Sequence[date]) -> Dict[date, List[AggregatedEntry]]:
    """Bucket aggregated entries per date, keeping display order; every date gets a list."""
    by_date: Dict[date, List[AggregatedEntry]] = {day: [] for day in dates}
    for entry in entries:
        by_date.setdefault(entry.business_date, []).append(entry)
    return by_date


# =============================================================================
# AGENT
# =============================================================================

class AggregatorAgent(BaseAgent):
    """
    Agent that merges rostered entries into per-person per-day records.

    Input: rostered_entries, run_config, target_dates
    Output: aggregated_entries (display order), aggregated_by_date
    """

    def __init__(self) -> None:
        """Initialize the aggregator."""
        super().__init__(name="AggregatorAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        entries: Sequence[ClassifiedEntry] = input_data.get("rostered_entries", [])
        config: RunConfig = input_data.get("run_config") or RunConfig()
        target_dates: Sequence[date] = input_data.get("target_dates") or []
        policy = AggregationPolicy(config.aggregation_policy)

        aggregated = aggregate(entries, policy=policy, threshold=config.full_day_threshold)
        by_date = group_by_date(aggregated, sorted(target_dates))

        full_days = sum(1 for e in aggregated if is_full_day(e.total_hours, config.full_day_threshold))
        logger.info(
            f"Aggregated {len(entries)} entries into {len(aggregated)} person-day record(s) "
            f"({full_days} full-day, policy={policy.value})"
        )

        return {"aggregated_entries": aggregated, "aggregated_by_date": by_date}
