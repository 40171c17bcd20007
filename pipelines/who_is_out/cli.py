#!/usr/bin/env python
"""
CLI entry point for the Who-Is-Out Pipeline.

Run this script directly:
    python pipelines/who_is_out/cli.py --mode daily

Execution Modes:
    --mode daily     Who is out on one business date (default)
    --mode weekly    Monday..Friday coverage for one week

Options via environment variables:
    PIPELINE_MODE=weekly         Override execution mode (CLI takes priority)
    TS_USERNAME / TS_PASSWORD    Timesheets login
    SLACK_BOT_TOKEN              Bot token for chat.postMessage
    SLACK_CHANNEL_ID             Daily report channel
    SLACK_CHANNEL_ID_LEADS       Weekly report channel (default: SLACK_CHANNEL_ID)
    SLACK_CHANNEL_ID_TEST        Failure notices
    MOCK_SLACK=1                 Log messages instead of posting
    DATE_YMD / WEEK_START_YMD    Date overrides (YYYY-MM-DD)
    SUPPORT_TEAM_NAMES           Roster, comma or newline separated
    ROSTER_FILE                  YAML roster file (takes priority over SUPPORT_TEAM_NAMES)
    FULL_DAY_HOURS               Full-day threshold (default: 7.99)
    AGGREGATION_POLICY           sum | max (default: sum)
    BUSINESS_TZ                  Business timezone (default: America/Denver)
    LOG_LEVEL                    Logging level (default: INFO)

Command line arguments:
    --mode, -m               Execution mode: daily | weekly (default: daily)
    --date                   Target date for daily mode (YYYY-MM-DD)
    --week-start             Monday of the week for weekly mode (YYYY-MM-DD)
    --roster-file            YAML roster file
    --policy                 Aggregation policy: sum | max
    --dry-run                Render the message without sending it
    --headed                 Show the browser window
    --verbose, -v            Debug logging

This avoids module reload warnings that occur with -m mode.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path for direct script execution
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from core.errors import DeliveryFailure
from core.logger import get_logger, set_level
from core.polling import TimeBudget
from core.tools.slack_tool import SlackClient
from core.tools.timesheets_page import open_timesheets_session
from pipelines.who_is_out.agents.slack_delivery_agent import notify_failure
from pipelines.who_is_out.config import (
    SLACK_CHANNEL_ID_LEADS,
    TS_PASSWORD,
    TS_USERNAME,
    VALID_POLICIES,
    load_run_config,
)
from pipelines.who_is_out.pipeline import (
    FLOW_LABELS,
    PIPELINE_NAME,
    VALID_MODES,
    get_pipeline_mode,
    run_report,
)

logger = get_logger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Who-Is-Out Pipeline - Report support team members out of office",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Modes:
  daily     Who is out today (default)
  weekly    Monday..Friday coverage

Examples:
  # Today's report, printed only
  python cli.py --dry-run

  # Report for a specific day
  python cli.py --date 2026-02-25

  # Weekly coverage starting on a given Monday
  python cli.py --mode weekly --week-start 2026-02-23
        """,
    )

    parser.add_argument(
        "-m", "--mode",
        choices=sorted(VALID_MODES),
        default=None,  # Will use get_pipeline_mode() for resolution
        help="Execution mode (default: daily, or PIPELINE_MODE env)",
    )
    parser.add_argument(
        "--date",
        default=None,
        help="Target date YYYY-MM-DD [daily mode only] (default: today, or DATE_YMD env)",
    )
    parser.add_argument(
        "--week-start",
        default=None,
        help="Week start YYYY-MM-DD [weekly mode only] (default: this Monday, or WEEK_START_YMD env)",
    )
    parser.add_argument(
        "--roster-file",
        default=None,
        help="YAML file listing roster names (default: ROSTER_FILE or SUPPORT_TEAM_NAMES env)",
    )
    parser.add_argument(
        "--policy",
        choices=sorted(VALID_POLICIES),
        default=None,
        help="Aggregation policy for same-day entries (default: sum, or AGGREGATION_POLICY env)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Render the message and print it instead of sending",
    )
    parser.add_argument(
        "--headed",
        action="store_true",
        help="Run the browser with a visible window",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def main(argv=None):
    """
    Main entry point for the pipeline.

    Opens a browser session, runs the report and delivers it. Any failure
    posts a short notice to SLACK_CHANNEL_ID_TEST and exits non-zero.
    """
    args = parse_args(argv)
    if args.verbose:
        set_level(logging.DEBUG)

    try:
        mode = get_pipeline_mode(args.mode)
        channel_id = SLACK_CHANNEL_ID_LEADS if mode == "weekly" and SLACK_CHANNEL_ID_LEADS else None
        config = load_run_config(
            target_date=args.date,
            week_start=args.week_start,
            roster_file=args.roster_file,
            policy=args.policy,
            channel_id=channel_id,
        )
    except ValueError as e:
        logger.error(str(e))
        return 1

    logger.info("=" * 60)
    logger.info(f"Running {PIPELINE_NAME}")
    logger.info(f"PIPELINE MODE: {mode.upper()}")
    logger.info(f"  Target Date: {config.target_date or '(today)'}")
    logger.info(f"  Week Start: {config.week_start or '(this week)'}")
    logger.info(f"  Roster Size: {len(config.roster_names) or '(no filter)'}")
    logger.info(f"  Policy: {config.aggregation_policy}")
    logger.info(f"  Channel: {config.channel_id or '(none)'}")
    logger.info(f"  Dry Run: {args.dry_run}")
    logger.info("=" * 60)

    slack_client = SlackClient()
    budget = TimeBudget(config.run_timeout)

    try:
        with open_timesheets_session(
            TS_USERNAME, TS_PASSWORD, headless=not args.headed, budget=budget
        ) as page:
            try:
                result = run_report(
                    page,
                    config,
                    mode=mode,
                    slack_client=slack_client,
                    dry_run=args.dry_run,
                    budget=budget,
                )
            except Exception:
                page.capture(f"{mode}_failure")
                raise
    except Exception as e:
        logger.error(f"✗ Pipeline failed: {e}")
        # The delivery stage already notified the fallback channel
        if not isinstance(e, DeliveryFailure):
            notify_failure(slack_client, config.fallback_channel_id, FLOW_LABELS[mode], e)
        return 1

    _print_summary(result, dry_run=args.dry_run)
    return 0


def _print_summary(result: dict, dry_run: bool = False):
    """Print the run summary."""
    logger.info("-" * 60)
    logger.info("PIPELINE RESULTS:")
    logger.info(f"  Selection: {result.get('selection_status', '')}")
    logger.info(f"  Extraction: {result.get('extraction_stats', {})}")
    logger.info(f"  Classification: {result.get('classification_stats', {})}")
    logger.info(f"  Roster: {result.get('roster_stats', {})}")
    logger.info(f"  People Out: {len(result.get('aggregated_entries', []))}")

    if dry_run:
        print(result.get("message_text", ""))
    else:
        logger.info(f"  Delivery: {result.get('delivery_status', {})}")

    logger.info("-" * 60)
    logger.info("✓ Pipeline completed successfully")


if __name__ == "__main__":
    sys.exit(main() or 0)
