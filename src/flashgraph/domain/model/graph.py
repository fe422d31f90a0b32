"""Flat entity store over the ownership tree rooted at ``DAQ``.

The root owns the tree; the graph indexes every reachable entity once by its
``id`` and builds the lookup pools the dispatcher routes rows into. Pools are
computed once: the topology is never restructured during a session.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Any

from flashgraph.domain.errors import TopologyConfigurationError
from flashgraph.domain.model.enums import EntityType

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping, Sequence
    from uuid import UUID

    from flashgraph.domain.model.builders import BU, RU
    from flashgraph.domain.model.daq import DAQ, SubSystem
    from flashgraph.domain.model.entity import Entity
    from flashgraph.domain.model.readout import FED, FRL, FRLPc
    from flashgraph.domain.model.trigger import FMM, FMMApplication, TTCPartition

log = getLogger(__name__)

type PoolContents = Mapping[Any, Entity] | Sequence[Entity]


class Pool(StrEnum):
    RUS_BY_HOSTNAME = "rus_by_hostname"
    BUS_BY_HOSTNAME = "bus_by_hostname"
    BUS_BY_INSTANCE = "bus_by_instance"
    FRL_PCS_BY_HOSTNAME = "frl_pcs_by_hostname"
    FMM_APPLICATIONS_BY_HOSTNAME = "fmm_applications_by_hostname"
    FEDS = "feds"
    FEDS_BY_EXPECTED_ID = "feds_by_expected_id"
    FRLS = "frls"
    FMMS = "fmms"
    TTC_PARTITIONS = "ttc_partitions"
    SUBSYSTEMS_BY_NAME = "subsystems_by_name"
    EVMS = "evms"
    DAQ = "daq"
    TCDS_GLOBAL_INFO = "tcds_global_info"


@dataclass(slots=True)
class _Keyed[TKey, TEntity: Entity]:
    """Keyed pool builder remembering duplicate keys for validation."""

    label: str
    entries: dict[TKey, TEntity] = field(default_factory=dict[TKey, TEntity])
    duplicates: list[TKey] = field(default_factory=list[TKey])

    def add(self, key: TKey | None, entity: TEntity) -> None:
        if key is None:
            return
        if key in self.entries:
            self.duplicates.append(key)
            return
        self.entries[key] = entity

    def problems(self) -> list[str]:
        return [f"duplicate {self.label} {key!r}" for key in self.duplicates]


class TopologyGraph:
    """Identity-keyed store of one session's entities plus dispatch pools."""

    def __init__(self, daq: DAQ) -> None:
        self._daq = daq
        self._entities_by_id: dict[UUID, Entity] = {}
        self._by_type: dict[EntityType, list[Entity]] = defaultdict(list)
        self._pools: dict[Pool, PoolContents] = {}
        self._problems: list[str] = []
        self._index()

    @classmethod
    def from_daq(cls, daq: DAQ, *, validate: bool = True) -> TopologyGraph:
        graph = cls(daq)
        if validate:
            graph.validate()
        return graph

    @property
    def daq(self) -> DAQ:
        return self._daq

    def __len__(self) -> int:
        return len(self._entities_by_id)

    def __contains__(self, entity: object) -> bool:
        entity_id = getattr(entity, "id", None)
        return entity_id is not None and self._entities_by_id.get(entity_id) is entity

    # --- queries -----------------------------------------------------------

    def entity(self, entity_id: UUID) -> Entity:
        return self._entities_by_id[entity_id]

    def entities(self, entity_type: EntityType | None = None) -> tuple[Entity, ...]:
        if entity_type is None:
            return tuple(self._entities_by_id.values())
        return tuple(self._by_type.get(entity_type, ()))

    def feds(self) -> tuple[FED, ...]:
        return self._typed(EntityType.FED)

    def rus(self) -> tuple[RU, ...]:
        return self._typed(EntityType.RU)

    def bus(self) -> tuple[BU, ...]:
        return self._typed(EntityType.BU)

    def ttc_partitions(self) -> tuple[TTCPartition, ...]:
        return self._typed(EntityType.TTC_PARTITION)

    def has_pool(self, pool: Pool) -> bool:
        return pool in self._pools

    def pool(self, pool: Pool) -> PoolContents:
        try:
            return self._pools[pool]
        except KeyError:
            raise TopologyConfigurationError(f"unknown entity pool {pool!r}") from None

    # --- lifecycle ---------------------------------------------------------

    def reset_absent(self, present: Iterable[UUID]) -> int:
        """Reset periodic state of every entity whose id is not in ``present``."""

        keep = set(present)
        count = 0
        for entity_id, entity in self._entities_by_id.items():
            if entity_id in keep:
                continue
            entity.reset()
            count += 1
        log.debug("Reset %d entities absent from the current session", count)
        return count

    def reset_all(self) -> None:
        for entity in self._entities_by_id.values():
            entity.reset()

    def validate(self) -> None:
        problems = [*self._problems, *self._check_back_references()]
        evms = self._pools[Pool.EVMS]
        if len(evms) > 1:
            problems.append(f"{len(evms)} readout units flagged as EVM, expected at most one")
        if problems:
            raise TopologyConfigurationError("invalid topology: " + "; ".join(problems))

    # --- construction ------------------------------------------------------

    def _typed(self, entity_type: EntityType) -> tuple[Any, ...]:
        return tuple(self._by_type.get(entity_type, ()))

    def _register(self, entity: Entity) -> bool:
        existing = self._entities_by_id.get(entity.id)
        if existing is not None:
            if existing is not entity:
                self._problems.append(f"identity {entity.id} used by two entities")
            return False
        self._entities_by_id[entity.id] = entity
        self._by_type[entity.entity_type].append(entity)
        return True

    def _walk(self) -> Iterator[Entity]:
        daq = self._daq
        yield daq
        yield daq.fed_builder_summary
        yield daq.bu_summary
        yield daq.tcds_global_info
        yield from daq.subsystems
        yield from daq.frl_pcs
        for application in daq.fmm_applications:
            yield application
            yield from application.fmms
        yield from daq.ttc_partitions
        for fed_builder in daq.fed_builders:
            yield fed_builder
            for sub_fed_builder in fed_builder.sub_fed_builders:
                yield sub_fed_builder
                for frl in sub_fed_builder.frls:
                    yield frl
                    yield from frl.feds.values()
            if fed_builder.ru is not None:
                yield fed_builder.ru
        yield from daq.feds_without_frl
        yield from daq.bus

    def _index(self) -> None:
        for entity in self._walk():
            self._register(entity)

        rus: _Keyed[str, RU] = _Keyed("RU hostname")
        bus_by_host: _Keyed[str, BU] = _Keyed("BU hostname")
        bus_by_instance: _Keyed[int, BU] = _Keyed("BU instance")
        frl_pcs: _Keyed[str, FRLPc] = _Keyed("FRL PC hostname")
        applications: _Keyed[str, FMMApplication] = _Keyed("FMM application hostname")
        feds_by_expected: _Keyed[int, FED] = _Keyed("expected FED source id")
        subsystems: _Keyed[str, SubSystem] = _Keyed("subsystem name")

        for ru in self.rus():
            rus.add(ru.hostname.lower(), ru)
        for bu in self.bus():
            bus_by_host.add(bu.hostname.lower(), bu)
            bus_by_instance.add(bu.instance, bu)
        frl_pc: FRLPc
        for frl_pc in self._typed(EntityType.FRL_PC):
            frl_pcs.add(frl_pc.hostname.lower(), frl_pc)
        application: FMMApplication
        for application in self._typed(EntityType.FMM_APPLICATION):
            applications.add(application.hostname.lower(), application)
        for fed in self.feds():
            feds_by_expected.add(fed.src_id_expected, fed)
        for subsystem in self._typed(EntityType.SUBSYSTEM):
            subsystems.add(subsystem.name, subsystem)

        frls: tuple[FRL, ...] = self._typed(EntityType.FRL)
        fmms: tuple[FMM, ...] = self._typed(EntityType.FMM)
        self._pools = {
            Pool.RUS_BY_HOSTNAME: rus.entries,
            Pool.BUS_BY_HOSTNAME: bus_by_host.entries,
            Pool.BUS_BY_INSTANCE: bus_by_instance.entries,
            Pool.FRL_PCS_BY_HOSTNAME: frl_pcs.entries,
            Pool.FMM_APPLICATIONS_BY_HOSTNAME: applications.entries,
            Pool.FEDS: self.feds(),
            Pool.FEDS_BY_EXPECTED_ID: feds_by_expected.entries,
            Pool.FRLS: frls,
            Pool.FMMS: fmms,
            Pool.TTC_PARTITIONS: self.ttc_partitions(),
            Pool.SUBSYSTEMS_BY_NAME: subsystems.entries,
            Pool.EVMS: tuple(ru for ru in self.rus() if ru.is_evm),
            Pool.DAQ: (self._daq,),
            Pool.TCDS_GLOBAL_INFO: (self._daq.tcds_global_info,),
        }
        keyed_pools: tuple[_Keyed[Any, Any], ...] = (
            rus,
            bus_by_host,
            bus_by_instance,
            frl_pcs,
            applications,
            feds_by_expected,
            subsystems,
        )
        for keyed in keyed_pools:
            self._problems.extend(keyed.problems())

    def _check_back_references(self) -> list[str]:
        problems: list[str] = []
        for fed_builder in self._daq.fed_builders:
            if fed_builder.ru is not None and fed_builder.ru.fed_builder is not fed_builder:
                problems.append(
                    f"RU {fed_builder.ru.hostname} does not point back to {fed_builder.name}"
                )
            for sub_fed_builder in fed_builder.sub_fed_builders:
                if sub_fed_builder.fed_builder is not fed_builder:
                    problems.append(
                        f"sub-FED-builder {sub_fed_builder.name} does not point back "
                        f"to {fed_builder.name}"
                    )
                for frl in sub_fed_builder.frls:
                    if frl.sub_fed_builder is not sub_fed_builder:
                        problems.append(
                            f"FRL slot {frl.geo_slot} does not point back to its sub-FED-builder"
                        )
                    for io, fed in frl.feds.items():
                        if fed.frl is not frl or fed.frl_io != io:
                            problems.append(
                                f"FED {fed.fed_id} does not point back to FRL input {io}"
                            )
        for application in self._daq.fmm_applications:
            for fmm in application.fmms:
                if fmm.fmm_application is not application:
                    problems.append(
                        f"FMM slot {fmm.geo_slot} does not point back to {application.hostname}"
                    )
        return problems
