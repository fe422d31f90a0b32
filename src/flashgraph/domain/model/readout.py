"""Readout chain entities: FEDs, the FRLs carrying them and their groupings.

Ownership runs top-down: FEDBuilder owns SubFEDBuilders (and one RU), a
SubFEDBuilder owns its FRLs, an FRL owns its FEDs by input. Back references
(``fed_builder``, ``sub_fed_builder``, ``frl``) are set by the owning command
and exist for lookup only.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from flashgraph.domain.flashlist import ColumnKind, FlashlistRow, FlashlistType
from flashgraph.domain.model.entity import Entity, owned, periodic, reference
from flashgraph.domain.model.enums import EntityType
from flashgraph.domain.updates import (
    AccumulatedDelta,
    Derived,
    FlashlistUpdatable,
    Overwrite,
    UpdatePlan,
    job_control_crashed,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from flashgraph.domain.model.builders import RU
    from flashgraph.domain.model.trigger import FMM, TTCPartition

# RU error vectors aligned index-by-index with ``fedIdsWithErrors``
_RU_ERROR_COUNTERS: tuple[tuple[str, str], ...] = (
    ("ru_fed_data_corruption", "fedDataCorruption"),
    ("ru_fed_out_of_sync", "fedOutOfSync"),
    ("ru_fed_bx_error", "fedBXerrors"),
    ("ru_fed_crc_error", "fedCRCerrors"),
)

RU_ERROR_FIELDS: tuple[str, ...] = (
    "ru_fed_in_error",
    "ru_fed_without_fragments",
    *(attr for attr, _ in _RU_ERROR_COUNTERS),
)


def _stream_enable_mask(fed: FED, row: FlashlistRow) -> Mapping[str, object]:
    if fed.frl_io is None:
        return {}
    return {"frl_masked": not row.boolean(f"enableStream{fed.frl_io}")}


def _ru_error_flags(fed: FED, row: FlashlistRow) -> Mapping[str, object]:
    with_errors = row.integers("fedIdsWithErrors")
    without_fragments = row.integers("fedIdsWithoutFragments")
    values: dict[str, object] = {
        "ru_fed_in_error": fed.src_id_expected in with_errors,
        "ru_fed_without_fragments": fed.src_id_expected in without_fragments,
    }
    if fed.src_id_expected in with_errors:
        position = with_errors.index(fed.src_id_expected)
        for attr, column in _RU_ERROR_COUNTERS:
            if column not in row:
                continue
            counts = row.integers(column)
            values[attr] = counts[position] if position < len(counts) else 0
    return values


_FEROL_STREAM_PLAN: UpdatePlan = (
    Overwrite("src_id_received", "WrongFEDId", ColumnKind.INTEGER),
    Overwrite("num_scrc_errors", "LinkCRCError", ColumnKind.INTEGER),
    Overwrite("num_frc_errors", "FEDCRCError", ColumnKind.INTEGER),
    Overwrite("num_triggers", "TriggerNumber", ColumnKind.INTEGER),
    Overwrite("event_counter", "EventCounter", ColumnKind.INTEGER),
    AccumulatedDelta(
        "percent_backpressure",
        "AccBackpressureSecond",
        raw_attr="_acc_backpressure",
        stamp_attr="_backpressure_timestamp",
    ),
    Overwrite("last_update", "timestamp", ColumnKind.TIMESTAMP),
)


@dataclass(eq=False, kw_only=True)
class FED(Entity, FlashlistUpdatable):
    """Front-end driver channel; pseudo FEDs (no SLINK) list their ``main_feds``."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FED
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.FMM_INPUT: (
            Overwrite("percent_warning", "fractionWarning", ColumnKind.FLOAT, scale=100.0),
            Overwrite("percent_busy", "fractionBusy", ColumnKind.FLOAT, scale=100.0),
            Overwrite("tts_state", "inputState"),
            Overwrite("fmm_masked", "isActive", ColumnKind.BOOLEAN, invert=True),
        ),
        FlashlistType.FEROL_INPUT_STREAM: _FEROL_STREAM_PLAN,
        FlashlistType.FEROL40_INPUT_STREAM: _FEROL_STREAM_PLAN,
        FlashlistType.FEROL_CONFIGURATION: (Derived(_stream_enable_mask),),
        FlashlistType.FEROL40_STREAM_CONFIGURATION: (
            Overwrite("frl_masked", "enable", ColumnKind.BOOLEAN, invert=True),
        ),
        FlashlistType.RU: (Derived(_ru_error_flags),),
    }

    fed_id: int
    src_id_expected: int
    frl_io: int | None = None
    fmm_io: int | None = None
    has_slink: bool = True
    has_tts: bool = True

    _frl: FRL | None = reference()
    fmm: FMM | None = reference()
    main_feds: list[FED] = reference(default_factory=list)

    src_id_received: int = periodic(default=0)
    percent_backpressure: float = periodic(default=0.0)
    percent_warning: float = periodic(default=0.0)
    percent_busy: float = periodic(default=0.0)
    tts_state: str | None = periodic()
    num_scrc_errors: int = periodic(default=0)
    num_frc_errors: int = periodic(default=0)
    num_triggers: int = periodic(default=0)
    event_counter: int = periodic(default=0)
    fmm_masked: bool = periodic(default=False)
    frl_masked: bool = periodic(default=False)
    ru_fed_in_error: bool = periodic(default=False)
    ru_fed_without_fragments: bool = periodic(default=False)
    ru_fed_data_corruption: int = periodic(default=0)
    ru_fed_out_of_sync: int = periodic(default=0)
    ru_fed_bx_error: int = periodic(default=0)
    ru_fed_crc_error: int = periodic(default=0)
    last_update: str | None = periodic()

    _acc_backpressure: float = periodic(default=0.0, export=False)
    _backpressure_timestamp: str | None = periodic(export=False)

    @property
    def frl(self) -> FRL | None:
        return self._frl

    @property
    def is_pseudo(self) -> bool:
        return not self.has_slink

    def _set_frl(self, frl: FRL, io: int) -> None:
        self._frl = frl
        self.frl_io = io


@dataclass(eq=False, kw_only=True)
class FRLPc(Entity, FlashlistUpdatable):
    """Host PC controlling a crate of FRLs."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FRL_PC
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.JOB_CONTROL: (Derived(job_control_crashed),),
    }

    hostname: str
    port: int = 0

    crashed: bool = periodic(default=False)


@dataclass(eq=False, kw_only=True)
class FRL(Entity, FlashlistUpdatable):
    """Readout card in a crate slot, owning up to one FED per input."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FRL
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.FEROL_STATUS: (Overwrite("state", "stateName"),),
        FlashlistType.FEROL40_STATUS: (Overwrite("state", "stateName"),),
    }

    geo_slot: int
    type: str = "FEROL"
    frl_pc: FRLPc | None = reference()
    _sub_fed_builder: SubFEDBuilder | None = reference()

    _feds: dict[int, FED] = field(default_factory=dict[int, FED], repr=False)

    state: str | None = periodic()

    @property
    def sub_fed_builder(self) -> SubFEDBuilder | None:
        return self._sub_fed_builder

    @property
    def feds(self) -> Mapping[int, FED]:
        return dict(self._feds)

    def add_fed(self, fed: FED, *, io: int) -> FED:
        if io in self._feds:
            raise ValueError(f"FRL slot {self.geo_slot} already has a FED on input {io}")
        fed._set_frl(self, io)  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        self._feds[io] = fed
        return fed


@dataclass(eq=False, kw_only=True)
class SubFEDBuilder(Entity):
    """One physical line of FRLs sharing a TTC partition."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.SUB_FED_BUILDER

    name: str
    ttc_partition: TTCPartition | None = reference()
    frl_pc: FRLPc | None = reference()
    _fed_builder: FEDBuilder | None = reference()

    _frls: list[FRL] = owned()

    min_trig: int = periodic(default=0)
    max_trig: int = periodic(default=0)

    @property
    def fed_builder(self) -> FEDBuilder | None:
        return self._fed_builder

    @property
    def frls(self) -> tuple[FRL, ...]:
        return tuple(self._frls)

    def iter_feds(self) -> Iterator[FED]:
        for frl in self._frls:
            yield from frl.feds.values()

    def add_frl(self, frl: FRL) -> FRL:
        frl._sub_fed_builder = self  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        if frl.frl_pc is None:
            frl.frl_pc = self.frl_pc
        self._frls.append(frl)
        return frl

    def calculate_derived_values(self) -> None:
        """Trigger counter spread over the FEDs of this line (0/0 when empty)."""

        counters = [fed.event_counter for fed in self.iter_feds()]
        self.min_trig = min(counters, default=0)
        self.max_trig = max(counters, default=0)


@dataclass(eq=False, kw_only=True)
class FEDBuilder(Entity):
    """Event-building slice: its SubFEDBuilders feed exactly one RU."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FED_BUILDER

    name: str

    _sub_fed_builders: list[SubFEDBuilder] = owned()
    _ru: RU | None = field(default=None, repr=False)

    @property
    def sub_fed_builders(self) -> tuple[SubFEDBuilder, ...]:
        return tuple(self._sub_fed_builders)

    @property
    def ru(self) -> RU | None:
        return self._ru

    def iter_feds(self) -> Iterator[FED]:
        for sub_fed_builder in self._sub_fed_builders:
            yield from sub_fed_builder.iter_feds()

    def add_sub_fed_builder(self, sub_fed_builder: SubFEDBuilder) -> SubFEDBuilder:
        sub_fed_builder._fed_builder = self  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        self._sub_fed_builders.append(sub_fed_builder)
        return sub_fed_builder

    def attach_ru(self, ru: RU) -> RU:
        ru._fed_builder = self  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        self._ru = ru
        return ru
