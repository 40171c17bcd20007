"""
Schedule Page Collaborator Contract.

Describes what the pipeline needs from the page-automation layer and from
the outbound messaging client. These are INTERFACES only: login flow,
menu navigation and diagnostic capture live in the adapters that satisfy
them (see core/tools/).

CRITICAL INVARIANTS:
- Reads never mutate the rendered grid
- Any call may raise TransientPageError; retry policy belongs to the caller
- No vendor SDK imports in this module
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, TypedDict


# =============================================================================
# INBOUND: PAGE AUTOMATION LAYER
# =============================================================================

class BlockSnapshot(TypedDict):
    """One rendered block inside a calendar day cell."""
    text: str        # Visible inner text, unnormalized
    style_attr: str  # Raw CSS class attribute (e.g. "timeOff published")


class RowHandle(Protocol):
    """One employee row of the rendered week grid."""

    def name(self) -> str:
        """Rendered person name (may be blank for filler rows)."""
        ...

    def blocks_for_column(self, index: int) -> List[BlockSnapshot]:
        """Zero or more blocks rendered in day column `index` (0-based)."""
        ...


class SchedulePage(Protocol):
    """Live scheduling session, already logged in and on the week grid."""

    def apply_select_all(self) -> None:
        """Perform the bulk "select all employees, then Update" action."""
        ...

    def sample_selection_counter_text(self) -> str:
        """Raw text of the bulk-selection readiness indicator."""
        ...

    def get_header_labels(self) -> List[str]:
        """Currently visible calendar day labels, in column order."""
        ...

    def get_rows(self) -> List[RowHandle]:
        """Employee rows of the currently visible week."""
        ...


# =============================================================================
# OUTBOUND: MESSAGING CLIENT
# =============================================================================

@dataclass(frozen=True)
class DeliveryRequest:
    """A rendered message addressed to one channel."""
    channel_id: str
    text: str


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome reported by a messaging client."""
    ok: bool
    error_code: Optional[str] = None
    error_message: Optional[str] = None


class MessagingClient(Protocol):
    """Anything that can deliver a DeliveryRequest."""

    def send(self, request: DeliveryRequest) -> DeliveryResult:
        ...
