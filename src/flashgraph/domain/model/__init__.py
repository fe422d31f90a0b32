"""Public entity graph surface."""

from __future__ import annotations

from flashgraph.domain.model.builders import BU, RU
from flashgraph.domain.model.daq import DAQ, BUSummary, FEDBuilderSummary, SubSystem
from flashgraph.domain.model.entity import Entity, owned, periodic, reference
from flashgraph.domain.model.enums import EntityType
from flashgraph.domain.model.graph import Pool, PoolContents, TopologyGraph
from flashgraph.domain.model.readout import (
    FED,
    FRL,
    RU_ERROR_FIELDS,
    FEDBuilder,
    FRLPc,
    SubFEDBuilder,
)
from flashgraph.domain.model.trigger import (
    FMM,
    FMMApplication,
    GlobalTTSState,
    TCDSGlobalInfo,
    TCDSPartitionInfo,
    TTCPartition,
)

__all__ = [  # noqa: RUF022
    # base
    "Entity",
    "EntityType",
    "owned",
    "periodic",
    "reference",
    # readout
    "FED",
    "FRL",
    "FRLPc",
    "SubFEDBuilder",
    "FEDBuilder",
    "RU_ERROR_FIELDS",
    # event builder
    "RU",
    "BU",
    # trigger
    "FMM",
    "FMMApplication",
    "TTCPartition",
    "TCDSPartitionInfo",
    "TCDSGlobalInfo",
    "GlobalTTSState",
    # system
    "DAQ",
    "SubSystem",
    "FEDBuilderSummary",
    "BUSummary",
    # store
    "TopologyGraph",
    "Pool",
    "PoolContents",
]
