"""
Tests for pipeline mode selection and construction.

Tests verify:
- Mode selection priority (CLI > ENV > default)
- Invalid mode handling
- Agent sequence per mode, with and without delivery
"""

import os
from unittest.mock import patch

import pytest

from fixtures.sample_schedule import RecordingClient
from pipelines.who_is_out.agents import (
    AggregatorAgent,
    DateReconcilerAgent,
    EntryClassifierAgent,
    EntryExtractorAgent,
    PresenterAgent,
    RosterFilterAgent,
    SelectionReadinessAgent,
    SlackDeliveryAgent,
)
from pipelines.who_is_out.pipeline import (
    DEFAULT_MODE,
    VALID_MODES,
    build_pipeline,
    get_pipeline_mode,
)

EXPECTED_SEQUENCE = [
    SelectionReadinessAgent,
    DateReconcilerAgent,
    EntryExtractorAgent,
    EntryClassifierAgent,
    RosterFilterAgent,
    AggregatorAgent,
    PresenterAgent,
    SlackDeliveryAgent,
]


class TestModeSelection:
    """Tests for get_pipeline_mode() function."""

    def test_cli_mode_takes_priority_over_env(self):
        with patch.dict(os.environ, {"PIPELINE_MODE": "daily"}):
            assert get_pipeline_mode(cli_mode="weekly") == "weekly"

    def test_env_mode_used_when_cli_not_provided(self):
        with patch.dict(os.environ, {"PIPELINE_MODE": "weekly"}):
            assert get_pipeline_mode(cli_mode=None) == "weekly"

    def test_default_mode_when_nothing_set(self):
        with patch.dict(os.environ, {}, clear=True):
            assert get_pipeline_mode(cli_mode=None) == DEFAULT_MODE == "daily"

    def test_valid_modes_constant(self):
        assert VALID_MODES == frozenset(["daily", "weekly"])

    def test_mode_case_and_whitespace(self):
        assert get_pipeline_mode("  WEEKLY ") == "weekly"

    def test_invalid_mode_raises_value_error(self):
        with pytest.raises(ValueError) as exc_info:
            get_pipeline_mode(cli_mode="monthly")
        assert "Invalid pipeline mode" in str(exc_info.value)
        assert "monthly" in str(exc_info.value)

    def test_build_pipeline_invalid_mode_raises(self):
        with pytest.raises(ValueError):
            build_pipeline(mode="monthly")


class TestPipelineConstruction:
    """Tests for build_pipeline()."""

    @pytest.mark.parametrize("mode", ["daily", "weekly"])
    def test_agent_sequence(self, mode):
        pipeline = build_pipeline(mode=mode, slack_client=RecordingClient())
        assert [type(a) for a in pipeline.agents] == EXPECTED_SEQUENCE
        assert pipeline.name.endswith(mode.upper())

    def test_dry_run_has_no_delivery_stage(self):
        pipeline = build_pipeline(mode="daily", dry_run=True)
        assert [type(a) for a in pipeline.agents] == EXPECTED_SEQUENCE[:-1]

    def test_weekly_stages_are_in_weekly_mode(self):
        pipeline = build_pipeline(mode="weekly", slack_client=RecordingClient())
        reconciler, presenter, delivery = pipeline.agents[1], pipeline.agents[6], pipeline.agents[7]
        assert reconciler.mode == "weekly"
        assert presenter.mode == "weekly"
        assert delivery.flow_label == "Weekly"
