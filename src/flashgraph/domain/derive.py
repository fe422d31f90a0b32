"""Derived values recomputed once all flashlists of a cycle are applied.

Two phases run in order because the global summaries read values the
per-parent phase has just written. Nothing is carried over between cycles.
"""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flashgraph.domain.model import FED, TopologyGraph, TTCPartition

log = getLogger(__name__)


class DerivedMetricPass:
    def run(self, graph: TopologyGraph) -> None:
        self.per_parent(graph)
        self.global_summaries(graph)

    def per_parent(self, graph: TopologyGraph) -> None:
        daq = graph.daq
        feds_by_partition: dict[TTCPartition, list[FED]] = defaultdict(list)
        for fed_builder in daq.fed_builders:
            for sub_fed_builder in fed_builder.sub_fed_builders:
                sub_fed_builder.calculate_derived_values()
                if sub_fed_builder.ttc_partition is not None:
                    feds_by_partition[sub_fed_builder.ttc_partition].extend(
                        sub_fed_builder.iter_feds()
                    )
        for ru in graph.rus():
            ru.calculate_derived_values()
        for partition in graph.ttc_partitions():
            partition.calculate_derived_values(feds_by_partition.get(partition, []))

    def global_summaries(self, graph: TopologyGraph) -> None:
        daq = graph.daq
        rus = graph.rus()
        bus = graph.bus()
        daq.fed_builder_summary.calculate_derived_values(rus)
        daq.bu_summary.calculate_derived_values(bus)
        log.debug(
            "Summaries over %d readout units and %d builder units: delta events %d",
            len(rus),
            len(bus),
            daq.fed_builder_summary.delta_events,
        )
