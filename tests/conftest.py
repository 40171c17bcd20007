"""
Pytest configuration and fixtures.

Sets up import paths for the test suite and keeps a developer's local
.env from leaking pipeline settings into tests.
"""

import sys
from pathlib import Path

import pytest

# Add project root to Python path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Add tests directory to path for fixtures
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

PIPELINE_ENV_VARS = (
    "PIPELINE_MODE",
    "DATE_YMD",
    "WEEK_START_YMD",
    "SUPPORT_TEAM_NAMES",
    "ROSTER_FILE",
    "FULL_DAY_HOURS",
    "BUSINESS_TZ",
    "AGGREGATION_POLICY",
    "READINESS_TIMEOUT_SECONDS",
    "READINESS_POLL_SECONDS",
    "RUN_TIMEOUT_SECONDS",
    "SLACK_CHANNEL_ID",
    "SLACK_CHANNEL_ID_TEST",
)


@pytest.fixture(autouse=True)
def isolated_pipeline_env(monkeypatch):
    """Unset every variable load_run_config() reads."""
    for name in PIPELINE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
