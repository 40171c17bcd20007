"""Who-Is-Out Pipeline construction.

Supports two execution modes:
    DAILY:  Who is out on one business date
    WEEKLY: Coverage for the Monday..Friday of one week
"""

import os
from datetime import datetime
from typing import Any, Dict, Literal, Optional

from core.contracts.schedule_page import MessagingClient, SchedulePage
from core.logger import get_logger
from core.polling import TimeBudget
from pipelines.core.runner import PipelineRunner
from pipelines.who_is_out.agents.selection_readiness_agent import SelectionReadinessAgent
from pipelines.who_is_out.agents.date_reconciler_agent import DateReconcilerAgent
from pipelines.who_is_out.agents.entry_extractor_agent import EntryExtractorAgent
from pipelines.who_is_out.agents.entry_classifier_agent import EntryClassifierAgent
from pipelines.who_is_out.agents.roster_filter_agent import RosterFilterAgent
from pipelines.who_is_out.agents.aggregator_agent import AggregatorAgent
from pipelines.who_is_out.agents.presenter_agent import PresenterAgent
from pipelines.who_is_out.agents.slack_delivery_agent import SlackDeliveryAgent
from pipelines.who_is_out.config import PIPELINE_NAME, RunConfig

logger = get_logger(__name__)


__all__ = [
    "build_pipeline",
    "run_report",
    "PIPELINE_NAME",
    "VALID_MODES",
    "get_pipeline_mode",
]


# =============================================================================
# MODE CONFIGURATION
# =============================================================================

# Valid execution modes
VALID_MODES = frozenset(["daily", "weekly"])

# Default mode if not specified
DEFAULT_MODE = "daily"

# Type alias for mode
PipelineMode = Literal["daily", "weekly"]

FLOW_LABELS = {"daily": "Daily", "weekly": "Weekly"}


def get_pipeline_mode(cli_mode: str | None = None) -> PipelineMode:
    """
    Determine pipeline execution mode from CLI or environment.

    Priority order:
        1. CLI argument (if provided)
        2. PIPELINE_MODE environment variable
        3. Default fallback: "daily"

    Args:
        cli_mode: Mode from command line argument (highest priority).

    Returns:
        Validated pipeline mode.

    Raises:
        ValueError: If mode is not in VALID_MODES.
    """
    if cli_mode is not None:
        mode = cli_mode.lower().strip()
    elif os.getenv("PIPELINE_MODE"):
        mode = os.getenv("PIPELINE_MODE", "").lower().strip()
    else:
        mode = DEFAULT_MODE

    if mode not in VALID_MODES:
        raise ValueError(
            f"Invalid pipeline mode: '{mode}'. "
            f"Allowed modes: {sorted(VALID_MODES)}"
        )

    return mode  # type: ignore


# =============================================================================
# PIPELINE BUILDERS
# =============================================================================

def _build_stages(
    mode: PipelineMode,
    slack_client: Optional[MessagingClient],
    deliver: bool,
    now: Optional[datetime],
) -> list:
    agents = [
        SelectionReadinessAgent(),
        DateReconcilerAgent(mode=mode, now=now),
        EntryExtractorAgent(),
        EntryClassifierAgent(),
        RosterFilterAgent(),
        AggregatorAgent(),
        PresenterAgent(mode=mode),
    ]
    if deliver:
        agents.append(SlackDeliveryAgent(client=slack_client, flow_label=FLOW_LABELS[mode]))
    return agents


def _build_daily_pipeline(
    slack_client: Optional[MessagingClient] = None,
    deliver: bool = True,
    now: Optional[datetime] = None,
) -> PipelineRunner:
    """
    Build the daily report pipeline.

    Pipeline flow:
        SelectionReadinessAgent → selection_status
        DateReconcilerAgent → column_map, target_dates [today or DATE_YMD]
        EntryExtractorAgent → raw_blocks
        EntryClassifierAgent → classified_entries
        RosterFilterAgent → rostered_entries
        AggregatorAgent → aggregated_entries
        PresenterAgent → delivery_request
        SlackDeliveryAgent → delivery_status (skipped on dry run)
    """
    logger.info("Building DAILY who-is-out pipeline")
    return PipelineRunner(
        name=f"{PIPELINE_NAME}_DAILY",
        agents=_build_stages("daily", slack_client, deliver, now),
    )


def _build_weekly_pipeline(
    slack_client: Optional[MessagingClient] = None,
    deliver: bool = True,
    now: Optional[datetime] = None,
) -> PipelineRunner:
    """
    Build the weekly coverage pipeline.

    Same stages as daily; the DateReconcilerAgent resolves Monday..Friday
    and the PresenterAgent renders one block per day.
    """
    logger.info("Building WEEKLY who-is-out pipeline")
    return PipelineRunner(
        name=f"{PIPELINE_NAME}_WEEKLY",
        agents=_build_stages("weekly", slack_client, deliver, now),
    )


def build_pipeline(
    mode: PipelineMode = "daily",
    slack_client: Optional[MessagingClient] = None,
    dry_run: bool = False,
    now: Optional[datetime] = None,
) -> PipelineRunner:
    """
    Build the Who-Is-Out pipeline in the specified mode.

    Pipeline flow:
        Input (schedule_page, run_config, time_budget)
        ┌─────────────────────────────────────────────┐
        │  SelectionReadinessAgent                    │
        │  → selection_status, selection_counter      │
        ├─────────────────────────────────────────────┤
        │  DateReconcilerAgent                        │
        │  → column_map, target_dates                 │
        ├─────────────────────────────────────────────┤
        │  EntryExtractorAgent                        │
        │  → raw_blocks                               │
        ├─────────────────────────────────────────────┤
        │  EntryClassifierAgent                       │
        │  → classified_entries                       │
        ├─────────────────────────────────────────────┤
        │  RosterFilterAgent                          │
        │  → rostered_entries                         │
        ├─────────────────────────────────────────────┤
        │  AggregatorAgent                            │
        │  → aggregated_entries, aggregated_by_date   │
        ├─────────────────────────────────────────────┤
        │  PresenterAgent                             │
        │  → message_text, delivery_request           │
        ├─────────────────────────────────────────────┤
        │  SlackDeliveryAgent (not on dry run)        │
        │  → delivery_status                          │
        └─────────────────────────────────────────────┘

    Args:
        mode: "daily" or "weekly".
        slack_client: Messaging client for delivery (SlackClient if None).
        dry_run: Stop after rendering; nothing is sent.
        now: Fixed instant for "today" (tests).

    Returns:
        Configured PipelineRunner instance.

    Raises:
        ValueError: If mode is not valid.
    """
    if mode not in VALID_MODES:
        raise ValueError(
            f"Invalid pipeline mode: '{mode}'. "
            f"Allowed modes: {sorted(VALID_MODES)}"
        )

    logger.info(f"PIPELINE MODE: {mode.upper()}{' (dry run)' if dry_run else ''}")

    if mode == "weekly":
        return _build_weekly_pipeline(slack_client, deliver=not dry_run, now=now)
    return _build_daily_pipeline(slack_client, deliver=not dry_run, now=now)


def run_report(
    page: SchedulePage,
    config: RunConfig,
    mode: PipelineMode = "daily",
    slack_client: Optional[MessagingClient] = None,
    dry_run: bool = False,
    now: Optional[datetime] = None,
    budget: Optional[TimeBudget] = None,
) -> Dict[str, Any]:
    """
    Run one report against an open schedule page.

    `budget` caps every wait in the run. Pass the one already charged for
    login and navigation; a fresh TimeBudget(config.run_timeout) is started
    when none is given.

    Returns:
        Final pipeline context (aggregated_entries, message_text, ...).

    Raises:
        PipelineAbort: Readiness timeout, budget exhausted, missing date
            column or failed delivery.
        RuntimeError: Any other stage failure.
    """
    pipeline = build_pipeline(mode=mode, slack_client=slack_client, dry_run=dry_run, now=now)
    context = {
        "schedule_page": page,
        "run_config": config,
        "time_budget": budget or TimeBudget(config.run_timeout),
    }
    return pipeline.run(context)
