"""
Roster Filter Agent for the Who-Is-Out pipeline.

Keeps only entries for people on the configured team roster. Rendered names
and roster names are compared in a normalized form; a rendered name that
contains a roster entry (middle name, suffix, double-barrelled surname)
still matches. No edit-distance matching.

An empty roster means no filter is configured: everyone is kept.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from core.logger import get_logger
from pipelines.core.base_agent import BaseAgent
from pipelines.who_is_out.config import RunConfig
from pipelines.who_is_out.models import ClassifiedEntry

logger = get_logger(__name__)

_NON_NAME_CHARS_RE = re.compile(r"[^a-z0-9 ]")
_WHITESPACE_RE = re.compile(r"\s+")

Roster = Tuple[str, ...]


def normalize_name(name: Optional[str]) -> str:
    """
    Canonical form of a person name.

    Lowercase, every character outside [a-z0-9 ] becomes a space, runs of
    whitespace collapse to one space, ends trimmed.

        >>> normalize_name("  Jane  Doe-Smith ")
        'jane doe smith'
    """
    lowered = str(name or "").lower()
    cleaned = _NON_NAME_CHARS_RE.sub(" ", lowered)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def build_roster(names: Optional[Iterable[str]]) -> Roster:
    """Normalize, drop blanks and dedupe roster names, keeping order."""
    seen: Dict[str, None] = {}
    for name in names or ():
        normalized = normalize_name(name)
        if normalized:
            seen.setdefault(normalized, None)
    return tuple(seen)


def is_member(name: str, roster: Optional[Sequence[str]]) -> bool:
    """
    Whether a rendered name belongs to the roster.

    True for any name when the roster is empty or unset. Otherwise true on
    exact normalized equality, or when the normalized name contains a
    roster entry as a substring.
    """
    if not roster:
        return True
    normalized = normalize_name(name)
    if not normalized:
        return False
    for entry in roster:
        member = normalize_name(entry)
        if member and (normalized == member or member in normalized):
            return True
    return False


class RosterFilterAgent(BaseAgent):
    """
    Agent that filters classified entries to roster members.

    Input: classified_entries, run_config (roster_names)
    Output: rostered_entries, roster_stats
    """

    def __init__(self) -> None:
        """Initialize the roster filter."""
        super().__init__(name="RosterFilterAgent")

    def run(self, input_data: Dict[str, Any]) -> Dict[str, Any]:
        entries: Sequence[ClassifiedEntry] = input_data.get("classified_entries", [])
        config: RunConfig = input_data.get("run_config") or RunConfig()
        roster = build_roster(config.roster_names)

        if not roster:
            logger.info("No roster configured; keeping all entries")
            kept: List[ClassifiedEntry] = list(entries)
        else:
            kept = [entry for entry in entries if is_member(entry.person_name, roster)]

        dropped_names = sorted({e.person_name for e in entries} - {e.person_name for e in kept})
        if dropped_names:
            logger.debug(f"Not on roster: {dropped_names}")

        logger.info(f"Roster filter kept {len(kept)}/{len(entries)} entries (roster size: {len(roster)})")

        return {
            "rostered_entries": kept,
            "roster_stats": {
                "roster_size": len(roster),
                "input": len(entries),
                "kept": len(kept),
                "dropped": len(entries) - len(kept),
            },
        }
