from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from flashgraph.adapters.snapshot import export_snapshot
from flashgraph.domain.cycle import CycleResult, MonitoringCycle, SnapshotHandoff
from flashgraph.domain.flashlist import FlashlistType
from tests.support.topology import BU_HOST_A, L0_URL, RU_HOST, context, flashlist, ru_record

if TYPE_CHECKING:
    from flashgraph.domain.dispatch import FlashlistDispatcher
    from flashgraph.domain.model import TopologyGraph


def test_cycle_updates_session_id_before_session_scoped_tables(
    graph: TopologyGraph, dispatcher: FlashlistDispatcher
) -> None:
    cycle = MonitoringCycle(graph, dispatcher, export_snapshot)
    subsystems = flashlist(
        FlashlistType.LEVEL_ZERO_FM_SUBSYS,
        {"SID": "5151", "SUBSYS": "TRACKER", "STATE": "Running", "FMURL": L0_URL},
    )
    dynamic = flashlist(
        FlashlistType.LEVEL_ZERO_FM_DYNAMIC,
        {"FMURL": L0_URL, "SID": "5151", "STATE": "Running", "RUN_NUMBER": 1},
    )

    result = cycle.run([subsystems, dynamic])

    assert [outcome.flashlist_type for outcome in result.outcomes] == [
        FlashlistType.LEVEL_ZERO_FM_DYNAMIC,
        FlashlistType.LEVEL_ZERO_FM_SUBSYS,
    ]
    assert result.outcomes[1].matched == 1
    tracker = next(s for s in graph.daq.subsystems if s.name == "TRACKER")
    assert tracker.status == "Running"


def test_cycle_runs_derived_pass_and_publishes_snapshot(
    graph: TopologyGraph, dispatcher: FlashlistDispatcher
) -> None:
    cycle = MonitoringCycle(graph, dispatcher, export_snapshot)

    result = cycle.run([flashlist(FlashlistType.RU, ru_record(RU_HOST, rate=80.0))])

    assert result.number == 1
    assert cycle.completed == 1
    assert graph.daq.fed_builder_summary.rate == 40.0
    assert result.snapshot["fed_builder_summary"]["rate"] == 40.0
    assert cycle.handoff.latest() is result


def test_cycle_survives_malformed_rows(
    graph: TopologyGraph, dispatcher: FlashlistDispatcher
) -> None:
    cycle = MonitoringCycle(graph, dispatcher, export_snapshot)

    result = cycle.run(
        [
            flashlist(FlashlistType.BU, {"context": context(BU_HOST_A), "stateName": 1.5j}),
            flashlist(FlashlistType.RU, ru_record(RU_HOST, rate=10.0)),
        ]
    )

    assert result.failed == 1
    assert graph.rus()[1].rate == 10.0


def test_handoff_wait_returns_next_completed_cycle(
    graph: TopologyGraph, dispatcher: FlashlistDispatcher
) -> None:
    handoff = SnapshotHandoff()
    cycle = MonitoringCycle(graph, dispatcher, lambda _graph: "snapshot", handoff=handoff)
    received: list[CycleResult | None] = []

    reader = threading.Thread(target=lambda: received.append(handoff.wait_for_cycle(timeout=5)))
    reader.start()
    cycle.run([])
    reader.join(timeout=5)

    assert handoff.wait_for_cycle(after=1, timeout=0.01) is None
    assert len(received) == 1
    assert received[0] is not None
    assert received[0].snapshot == "snapshot"
