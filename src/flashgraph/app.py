"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from flashgraph.adapters.las import load_flashlist
from flashgraph.adapters.snapshot import export_snapshot
from flashgraph.adapters.topology import load_topology
from flashgraph.config import SessionConfig, get_session_config
from flashgraph.domain.cycle import MonitoringCycle, SnapshotExporter
from flashgraph.domain.dispatch import DispatchContext, FlashlistDispatcher, SessionContext
from flashgraph.domain.reporting import MatchReporter

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from flashgraph.domain.cycle import CycleResult
    from flashgraph.domain.model import TopologyGraph

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ReplayResult:
    last_cycle: CycleResult
    reporter: MatchReporter


def session_context(config: SessionConfig) -> SessionContext:
    return SessionContext(
        l0_filter=config.l0_filter,
        tcds_service=config.tcds_service,
        tcds_url=config.tcds_url,
    )


def build_cycle(
    graph: TopologyGraph,
    config: SessionConfig,
    *,
    reporter: MatchReporter | None = None,
    exporter: SnapshotExporter = export_snapshot,
) -> MonitoringCycle:
    """Wire dispatcher, derived pass and snapshot export around ``graph``."""

    context = DispatchContext(session=session_context(config), reporter=reporter or MatchReporter())
    dispatcher = FlashlistDispatcher(graph, context)
    return MonitoringCycle(graph, dispatcher, exporter)


def replay_cycles(
    *,
    topology_path: Path,
    flashlist_paths: Sequence[Path],
    config: SessionConfig | None = None,
    cycles: int = 1,
) -> ReplayResult:
    """Apply the same recorded flashlists ``cycles`` times to a freshly built topology."""

    if cycles < 1:
        raise ValueError("At least one cycle is required")
    effective_config = config or get_session_config()
    graph = load_topology(topology_path)
    flashlists = [load_flashlist(path) for path in flashlist_paths]
    reporter = MatchReporter()
    cycle = build_cycle(graph, effective_config, reporter=reporter)
    log.info(
        "Replaying %d flashlists for %d cycles: l0_filter=%s, tcds_service=%s",
        len(flashlists),
        cycles,
        effective_config.l0_filter,
        effective_config.tcds_service,
    )

    result = cycle.run(flashlists)
    for _ in range(cycles - 1):
        result = cycle.run(flashlists)

    reporter.log_summary()
    return ReplayResult(last_cycle=result, reporter=reporter)
