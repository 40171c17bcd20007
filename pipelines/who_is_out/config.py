"""Configuration constants and per-run settings for the Who-Is-Out pipeline."""

import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from core.config_loader import load_roster_names

load_dotenv()

# Pipeline identification
PIPELINE_NAME = "WHO_IS_OUT_PIPELINE"

# =============================================================================
# BUSINESS DEFAULTS
# =============================================================================

DEFAULT_TIMEZONE = "America/Denver"

# An 8-hour day, tolerating float rounding of "7.999..."
DEFAULT_FULL_DAY_THRESHOLD = 7.99

# Hours assumed for a time-off block that shows no number
DEFAULT_FULL_DAY_HOURS = 8.0

# The week grid always renders Sunday..Saturday
GRID_COLUMN_COUNT = 7

# Weekly report covers Monday..Friday
WORKWEEK_DAYS = 5

# =============================================================================
# TIMEOUTS
# =============================================================================

DEFAULT_READINESS_TIMEOUT_SECONDS = 120.0
DEFAULT_READINESS_POLL_SECONDS = 0.5
DEFAULT_RUN_TIMEOUT_SECONDS = 600.0

# Collaborator retry policy
PAGE_CALL_ATTEMPTS = int(os.getenv("PAGE_CALL_ATTEMPTS", "3"))
PAGE_CALL_BACKOFF_SECONDS = float(os.getenv("PAGE_CALL_BACKOFF_SECONDS", "1.0"))

# =============================================================================
# CREDENTIALS & CHANNELS (from environment)
# =============================================================================

TS_USERNAME = os.getenv("TS_USERNAME", "")
TS_PASSWORD = os.getenv("TS_PASSWORD", "")

SLACK_CHANNEL_ID = os.getenv("SLACK_CHANNEL_ID", "")
SLACK_CHANNEL_ID_LEADS = os.getenv("SLACK_CHANNEL_ID_LEADS", "")
SLACK_CHANNEL_ID_TEST = os.getenv("SLACK_CHANNEL_ID_TEST", "")

VALID_POLICIES = frozenset(["sum", "max"])


def parse_roster_env(raw: Optional[str]) -> List[str]:
    """Split SUPPORT_TEAM_NAMES on commas or newlines."""
    if not raw:
        return []
    parts = raw.replace("\n", ",").split(",")
    return [p.strip() for p in parts if p.strip()]


def parse_ymd(value: Optional[str], name: str) -> Optional[date]:
    """
    Parse a YYYY-MM-DD override.

    Raises:
        ValueError: If the value is set but malformed.
    """
    if not value or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"{name} must be YYYY-MM-DD, got {value!r}") from None


@dataclass(frozen=True)
class RunConfig:
    """
    Everything a single run needs, resolved once and passed explicitly.

    Deep stages read thresholds and the roster from here, never from the
    process environment.
    """
    target_date: Optional[date] = None
    week_start: Optional[date] = None
    roster_names: Tuple[str, ...] = ()
    full_day_threshold: float = DEFAULT_FULL_DAY_THRESHOLD
    timezone: str = DEFAULT_TIMEZONE
    aggregation_policy: str = "sum"
    readiness_timeout: float = DEFAULT_READINESS_TIMEOUT_SECONDS
    readiness_poll_interval: float = DEFAULT_READINESS_POLL_SECONDS
    run_timeout: float = DEFAULT_RUN_TIMEOUT_SECONDS
    channel_id: str = ""
    fallback_channel_id: str = ""

    def __post_init__(self) -> None:
        if self.aggregation_policy not in VALID_POLICIES:
            raise ValueError(
                f"Invalid aggregation policy: '{self.aggregation_policy}'. "
                f"Allowed policies: {sorted(VALID_POLICIES)}"
            )
        if self.full_day_threshold <= 0:
            raise ValueError(f"full_day_threshold must be positive, got {self.full_day_threshold}")


def load_run_config(
    target_date: Optional[str] = None,
    week_start: Optional[str] = None,
    roster_file: Optional[str | Path] = None,
    policy: Optional[str] = None,
    channel_id: Optional[str] = None,
) -> RunConfig:
    """
    Build a RunConfig from explicit arguments, falling back to environment.

    Priority for each value: argument > environment variable > default.
    The roster comes from roster_file (or ROSTER_FILE) when given, else
    from SUPPORT_TEAM_NAMES.

    Returns:
        Validated RunConfig.

    Raises:
        ValueError: On malformed dates, thresholds or policy names.
    """
    roster_path = roster_file or os.getenv("ROSTER_FILE")
    if roster_path:
        roster_names = load_roster_names(roster_path)
    else:
        roster_names = parse_roster_env(os.getenv("SUPPORT_TEAM_NAMES"))

    resolved_policy = (policy or os.getenv("AGGREGATION_POLICY") or "sum").lower().strip()

    return RunConfig(
        target_date=parse_ymd(target_date or os.getenv("DATE_YMD"), "DATE_YMD"),
        week_start=parse_ymd(week_start or os.getenv("WEEK_START_YMD"), "WEEK_START_YMD"),
        roster_names=tuple(roster_names),
        full_day_threshold=float(os.getenv("FULL_DAY_HOURS", str(DEFAULT_FULL_DAY_THRESHOLD))),
        timezone=os.getenv("BUSINESS_TZ", DEFAULT_TIMEZONE),
        aggregation_policy=resolved_policy,
        readiness_timeout=float(os.getenv("READINESS_TIMEOUT_SECONDS", str(DEFAULT_READINESS_TIMEOUT_SECONDS))),
        readiness_poll_interval=float(os.getenv("READINESS_POLL_SECONDS", str(DEFAULT_READINESS_POLL_SECONDS))),
        run_timeout=float(os.getenv("RUN_TIMEOUT_SECONDS", str(DEFAULT_RUN_TIMEOUT_SECONDS))),
        channel_id=channel_id or os.getenv("SLACK_CHANNEL_ID", ""),
        fallback_channel_id=os.getenv("SLACK_CHANNEL_ID_TEST", ""),
    )
