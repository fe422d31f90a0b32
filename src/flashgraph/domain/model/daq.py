"""System root, subsystems and the system-wide summaries."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from statistics import fmean
from typing import TYPE_CHECKING, ClassVar

from flashgraph.domain.flashlist import ColumnKind, FlashlistRow, FlashlistType
from flashgraph.domain.model.entity import Entity, owned, periodic
from flashgraph.domain.model.enums import EntityType
from flashgraph.domain.model.trigger import TCDSGlobalInfo
from flashgraph.domain.updates import Derived, FlashlistUpdatable, Overwrite, UpdatePlan

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence

    from flashgraph.domain.model.builders import BU, RU
    from flashgraph.domain.model.readout import FED, FEDBuilder, FRLPc
    from flashgraph.domain.model.trigger import FMMApplication, TTCPartition

DAQ_SUBSYSTEM = "DAQ"

_OPTIONAL_LEVEL_ZERO_COLUMNS: tuple[tuple[str, str], ...] = (
    ("lhc_machine_mode", "LHC_MACHINE_MODE"),
    ("lhc_beam_mode", "LHC_BEAM_MODE"),
    ("last_update", "timestamp"),
)


def _optional_level_zero_columns(_daq: DAQ, row: FlashlistRow) -> Mapping[str, object]:
    return {
        attr: row.text(column)
        for attr, column in _OPTIONAL_LEVEL_ZERO_COLUMNS
        if row.fields.get(column) is not None
    }


@dataclass(eq=False, kw_only=True)
class SubSystem(Entity, FlashlistUpdatable):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SUBSYSTEM
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.LEVEL_ZERO_FM_SUBSYS: (Overwrite("status", "STATE"),),
    }

    name: str

    status: str | None = periodic()


@dataclass(eq=False, kw_only=True)
class FEDBuilderSummary(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FED_BUILDER_SUMMARY

    rate: float = periodic(default=0.0)
    throughput: float = periodic(default=0.0)
    super_fragment_size_mean: float = periodic(default=0.0)
    super_fragment_size_stddev: float = periodic(default=0.0)
    delta_events: int = periodic(default=0)
    sum_fragments_in_ru: int = periodic(default=0)
    sum_events_in_ru: int = periodic(default=0)
    sum_requests: int = periodic(default=0)

    def calculate_derived_values(self, rus: Sequence[RU]) -> None:
        """Recompute every value from ``rus``; means are 0 without readout units.

        ``delta_events`` is the spread of ``events_in_ru`` where units reporting
        zero events are left out of the minimum.
        """

        self.reset()
        if not rus:
            return
        self.rate = fmean(ru.rate for ru in rus)
        self.super_fragment_size_mean = fmean(ru.super_fragment_size_mean for ru in rus)
        self.super_fragment_size_stddev = fmean(ru.super_fragment_size_stddev for ru in rus)
        self.throughput = sum(ru.throughput for ru in rus)
        self.sum_events_in_ru = sum(ru.events_in_ru for ru in rus)
        self.sum_fragments_in_ru = sum(ru.fragments_in_ru for ru in rus)
        self.sum_requests = sum(ru.requests for ru in rus)
        non_zero = [ru.events_in_ru for ru in rus if ru.events_in_ru != 0]
        if non_zero:
            self.delta_events = max(ru.events_in_ru for ru in rus) - min(non_zero)


@dataclass(eq=False, kw_only=True)
class BUSummary(Entity):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.BU_SUMMARY

    # BU attributes summed into this summary under the same name
    SUMMED: ClassVar[tuple[str, ...]] = (
        "rate",
        "throughput",
        "num_events",
        "num_events_in_bu",
        "num_requests_sent",
        "num_requests_used",
        "num_requests_blocked",
        "num_fus_hlt",
        "num_fus_crashed",
        "num_fus_stale",
        "num_fus_cloud",
        "ram_disk_usage",
        "ram_disk_total",
        "num_files",
    )

    rate: float = periodic(default=0.0)
    throughput: float = periodic(default=0.0)
    event_size_mean: float = periodic(default=0.0)
    event_size_stddev: float = periodic(default=0.0)
    num_events: int = periodic(default=0)
    num_events_in_bu: int = periodic(default=0)
    num_requests_sent: int = periodic(default=0)
    num_requests_used: int = periodic(default=0)
    num_requests_blocked: int = periodic(default=0)
    num_fus_hlt: int = periodic(default=0)
    num_fus_crashed: int = periodic(default=0)
    num_fus_stale: int = periodic(default=0)
    num_fus_cloud: int = periodic(default=0)
    ram_disk_usage: float = periodic(default=0.0)
    ram_disk_total: float = periodic(default=0.0)
    num_files: int = periodic(default=0)

    def calculate_derived_values(self, bus: Sequence[BU]) -> None:
        self.reset()
        if not bus:
            return
        for name in self.SUMMED:
            setattr(self, name, sum(getattr(bu, name) for bu in bus))
        self.event_size_mean = fmean(bu.event_size_mean for bu in bus)
        self.event_size_stddev = fmean(bu.event_size_stddev for bu in bus)


@dataclass(eq=False, kw_only=True)
class DAQ(Entity, FlashlistUpdatable):
    """Root of the topology; the only entity owning the full ownership tree."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.DAQ
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.LEVEL_ZERO_FM_DYNAMIC: (
            Overwrite("session_id", "SID", ColumnKind.INTEGER),
            Overwrite("level_zero_state", "STATE"),
            Overwrite("run_number", "RUN_NUMBER", ColumnKind.INTEGER),
            Derived(_optional_level_zero_columns),
        ),
        FlashlistType.LEVEL_ZERO_FM_SUBSYS: (Overwrite("daq_state", "STATE"),),
    }

    session_id: int | None = None
    run_number: int | None = None

    _fed_builders: list[FEDBuilder] = owned()
    _bus: list[BU] = owned()
    _frl_pcs: list[FRLPc] = owned()
    _fmm_applications: list[FMMApplication] = owned()
    _ttc_partitions: list[TTCPartition] = owned()
    _subsystems: list[SubSystem] = owned()
    _feds_without_frl: list[FED] = owned()
    fed_builder_summary: FEDBuilderSummary = field(default_factory=FEDBuilderSummary)
    bu_summary: BUSummary = field(default_factory=BUSummary)
    tcds_global_info: TCDSGlobalInfo = field(default_factory=TCDSGlobalInfo)

    level_zero_state: str | None = periodic()
    daq_state: str | None = periodic()
    lhc_machine_mode: str | None = periodic()
    lhc_beam_mode: str | None = periodic()
    last_update: str | None = periodic()

    @property
    def fed_builders(self) -> tuple[FEDBuilder, ...]:
        return tuple(self._fed_builders)

    @property
    def bus(self) -> tuple[BU, ...]:
        return tuple(self._bus)

    @property
    def frl_pcs(self) -> tuple[FRLPc, ...]:
        return tuple(self._frl_pcs)

    @property
    def fmm_applications(self) -> tuple[FMMApplication, ...]:
        return tuple(self._fmm_applications)

    @property
    def ttc_partitions(self) -> tuple[TTCPartition, ...]:
        return tuple(self._ttc_partitions)

    @property
    def subsystems(self) -> tuple[SubSystem, ...]:
        return tuple(self._subsystems)

    @property
    def feds_without_frl(self) -> tuple[FED, ...]:
        """FEDs not read out through an FRL (pseudo FEDs, TTS-only FEDs)."""

        return tuple(self._feds_without_frl)

    def add_fed_builder(self, fed_builder: FEDBuilder) -> FEDBuilder:
        self._fed_builders.append(fed_builder)
        return fed_builder

    def add_bu(self, bu: BU) -> BU:
        self._bus.append(bu)
        return bu

    def add_frl_pc(self, frl_pc: FRLPc) -> FRLPc:
        self._frl_pcs.append(frl_pc)
        return frl_pc

    def add_fmm_application(self, fmm_application: FMMApplication) -> FMMApplication:
        self._fmm_applications.append(fmm_application)
        return fmm_application

    def add_ttc_partition(self, ttc_partition: TTCPartition) -> TTCPartition:
        self._ttc_partitions.append(ttc_partition)
        return ttc_partition

    def add_subsystem(self, subsystem: SubSystem) -> SubSystem:
        self._subsystems.append(subsystem)
        return subsystem

    def add_fed_without_frl(self, fed: FED) -> FED:
        self._feds_without_frl.append(fed)
        return fed

    def iter_rus(self) -> Iterator[RU]:
        for fed_builder in self._fed_builders:
            if fed_builder.ru is not None:
                yield fed_builder.ru

    def iter_feds(self) -> Iterator[FED]:
        for fed_builder in self._fed_builders:
            yield from fed_builder.iter_feds()
        yield from self._feds_without_frl
