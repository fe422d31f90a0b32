"""One monitoring cycle: ordered dispatch, derived pass and hand-off to readers.

The graph has no locking of its own. ``MonitoringCycle`` holds the write lock
for a whole cycle and readers only ever get the snapshot exported after the
derived pass, through ``SnapshotHandoff``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from threading import Condition, Lock
from typing import TYPE_CHECKING, Any

from flashgraph.domain.derive import DerivedMetricPass

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from flashgraph.domain.dispatch import DispatchOutcome, FlashlistDispatcher
    from flashgraph.domain.flashlist import Flashlist
    from flashgraph.domain.model import TopologyGraph

log = getLogger(__name__)

type SnapshotExporter = Callable[[TopologyGraph], Any]


@dataclass(frozen=True, slots=True)
class CycleResult:
    number: int
    outcomes: tuple[DispatchOutcome, ...]
    snapshot: Any
    completed_at: datetime

    @property
    def unmatched(self) -> int:
        return sum(outcome.unmatched for outcome in self.outcomes)

    @property
    def failed(self) -> int:
        return sum(outcome.failed for outcome in self.outcomes)


class SnapshotHandoff:
    """Latest completed cycle, with a way to wait for the next one."""

    def __init__(self) -> None:
        self._condition = Condition()
        self._latest: CycleResult | None = None

    def publish(self, result: CycleResult) -> None:
        with self._condition:
            self._latest = result
            self._condition.notify_all()

    def latest(self) -> CycleResult | None:
        with self._condition:
            return self._latest

    def wait_for_cycle(self, after: int = 0, timeout: float | None = None) -> CycleResult | None:
        """Block until a cycle numbered above ``after`` completed; ``None`` on timeout."""

        with self._condition:
            self._condition.wait_for(
                lambda: self._latest is not None and self._latest.number > after,
                timeout=timeout,
            )
            if self._latest is not None and self._latest.number > after:
                return self._latest
            return None


class MonitoringCycle:
    def __init__(
        self,
        graph: TopologyGraph,
        dispatcher: FlashlistDispatcher,
        exporter: SnapshotExporter,
        *,
        derived: DerivedMetricPass | None = None,
        handoff: SnapshotHandoff | None = None,
    ) -> None:
        self._graph = graph
        self._dispatcher = dispatcher
        self._exporter = exporter
        self._derived = derived or DerivedMetricPass()
        self.handoff = handoff or SnapshotHandoff()
        self._lock = Lock()
        self._count = 0

    @property
    def completed(self) -> int:
        return self._count

    def run(self, flashlists: Iterable[Flashlist]) -> CycleResult:
        """Apply one cycle's flashlists; always runs to completion."""

        with self._lock:
            outcomes = tuple(
                self._dispatcher.dispatch(flashlist)
                for flashlist in self._dispatcher.ordered(flashlists)
            )
            self._derived.run(self._graph)
            self._count += 1
            result = CycleResult(
                number=self._count,
                outcomes=outcomes,
                snapshot=self._exporter(self._graph),
                completed_at=datetime.now(tz=UTC),
            )
            self.handoff.publish(result)
        log.info(
            "Cycle %d complete: %d flashlists, %d unmatched rows, %d failed updates",
            result.number,
            len(outcomes),
            result.unmatched,
            result.failed,
        )
        return result
