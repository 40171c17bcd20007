"""Agents for the Who-Is-Out pipeline."""

from pipelines.who_is_out.agents.selection_readiness_agent import SelectionReadinessAgent
from pipelines.who_is_out.agents.date_reconciler_agent import DateReconcilerAgent
from pipelines.who_is_out.agents.entry_extractor_agent import EntryExtractorAgent
from pipelines.who_is_out.agents.entry_classifier_agent import EntryClassifierAgent
from pipelines.who_is_out.agents.roster_filter_agent import RosterFilterAgent
from pipelines.who_is_out.agents.aggregator_agent import AggregatorAgent
from pipelines.who_is_out.agents.presenter_agent import PresenterAgent
from pipelines.who_is_out.agents.slack_delivery_agent import SlackDeliveryAgent

__all__ = [
    "SelectionReadinessAgent",
    "DateReconcilerAgent",
    "EntryExtractorAgent",
    "EntryClassifierAgent",
    "RosterFilterAgent",
    "AggregatorAgent",
    "PresenterAgent",
    "SlackDeliveryAgent",
]
