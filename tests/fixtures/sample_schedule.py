"""
In-memory schedule page fixtures for pipeline testing.

Provides fakes satisfying the SchedulePage / RowHandle / MessagingClient
contracts so every stage can run offline:
- FakeRow / FakeSchedulePage for the week grid
- FakeClock for deterministic polling
- RecordingClient for delivery assertions
"""

from datetime import date, timedelta
from typing import Dict, List, Optional, Sequence

from core.contracts.schedule_page import BlockSnapshot, DeliveryRequest, DeliveryResult
from core.errors import TransientPageError


# Sunday 2026-02-22 .. Saturday 2026-02-28
SAMPLE_WEEK_SUNDAY = date(2026, 2, 22)
SAMPLE_HEADER_LABELS = [
    f"{(SAMPLE_WEEK_SUNDAY + timedelta(days=i)).strftime('%a')} 2/{22 + i}/2026"
    for i in range(7)
]

# Wednesday column in the sample week
WEDNESDAY_COLUMN = 3


def block(text: str, style_attr: str = "timeOff published") -> BlockSnapshot:
    """Build a BlockSnapshot."""
    return {"text": text, "style_attr": style_attr}


class FakeRow:
    """RowHandle backed by a column → blocks dict."""

    def __init__(self, name: str, blocks: Optional[Dict[int, List[BlockSnapshot]]] = None) -> None:
        self._name = name
        self._blocks = blocks or {}
        self.reads = 0

    def name(self) -> str:
        return self._name

    def blocks_for_column(self, index: int) -> List[BlockSnapshot]:
        self.reads += 1
        return list(self._blocks.get(index, []))


class FlakyRow(FakeRow):
    """FakeRow whose first `failures` column reads raise TransientPageError."""

    def __init__(self, name: str, blocks=None, failures: int = 1) -> None:
        super().__init__(name, blocks)
        self.failures = failures

    def blocks_for_column(self, index: int) -> List[BlockSnapshot]:
        if self.failures > 0:
            self.failures -= 1
            raise TransientPageError("detached from DOM")
        return super().blocks_for_column(index)


class FakeSchedulePage:
    """
    SchedulePage double.

    The selection counter returns `counter_sequence` values in order and
    then keeps repeating the last one.
    """

    def __init__(
        self,
        rows: Sequence[FakeRow] = (),
        header_labels: Sequence[str] = tuple(SAMPLE_HEADER_LABELS),
        counter_sequence: Sequence[str] = ("39 / 39",),
    ) -> None:
        self.rows = list(rows)
        self.header_labels = list(header_labels)
        self.counter_sequence = list(counter_sequence)
        self.select_all_calls = 0
        self.counter_samples = 0

    def apply_select_all(self) -> None:
        self.select_all_calls += 1

    def sample_selection_counter_text(self) -> str:
        index = min(self.counter_samples, len(self.counter_sequence) - 1)
        self.counter_samples += 1
        return self.counter_sequence[index]

    def get_header_labels(self) -> List[str]:
        return list(self.header_labels)

    def get_rows(self) -> List[FakeRow]:
        return list(self.rows)


class FakeClock:
    """Monotonic clock whose sleep() just advances time."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class RecordingClient:
    """MessagingClient that records requests and answers from a script."""

    def __init__(self, results: Sequence[DeliveryResult] = ()) -> None:
        self.results = list(results)
        self.requests: List[DeliveryRequest] = []

    def send(self, request: DeliveryRequest) -> DeliveryResult:
        self.requests.append(request)
        if self.results:
            return self.results.pop(0)
        return DeliveryResult(ok=True)


def generate_sample_rows() -> List[FakeRow]:
    """
    Rows for the sample week.

    Wednesday 2/25: Jane Doe 4h Sick + 4h PTO, John Roe 4h PTO,
    Alex Stranger (not on the roster) 8h PTO. Monday 2/23: a regular shift
    for John Roe. Plus one blank filler row.
    """
    return [
        FakeRow("Jane Doe", {
            WEDNESDAY_COLUMN: [block("4.00 Sick"), block("4.00 PTO")],
        }),
        FakeRow("John Roe", {
            1: [block("9:00a - 5:00p Support", "default schedule-item published")],
            WEDNESDAY_COLUMN: [block("4.00 PTO", "timeOff unpublished")],
        }),
        FakeRow("Alex Stranger", {
            WEDNESDAY_COLUMN: [block("8.00 PTO")],
        }),
        FakeRow("", {WEDNESDAY_COLUMN: [block("8.00 PTO")]}),
    ]
