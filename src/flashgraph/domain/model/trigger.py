"""Trigger distribution entities: TTC partitions, FMMs and TCDS global information."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, ClassVar

from flashgraph.domain.flashlist import ColumnKind, FlashlistRow, FlashlistType
from flashgraph.domain.model.entity import Entity, owned, periodic, reference
from flashgraph.domain.model.enums import EntityType
from flashgraph.domain.updates import (
    Derived,
    FlashlistUpdatable,
    Overwrite,
    UpdatePlan,
    job_control_crashed,
)

if TYPE_CHECKING:
    from flashgraph.domain.model.readout import FED

DEADTIME_PREFIX = "deadtime_"
ACTION_COUNT_SUFFIXES = ("_cnt", "_count")
# bookkeeping columns present in every TCDS row
_TCDS_KEY_COLUMNS = frozenset({"service", "context", "lid", "timestamp"})


@dataclass(frozen=True, slots=True)
class TCDSPartitionInfo:
    """Position of a partition in the TCDS partition manager.

    ``null_cause`` is set when the position could not be determined; it is then
    shown in place of the TCDS TTS states.
    """

    pm_nr: int | None = None
    ici_nr: int | None = None
    null_cause: str | None = None


@dataclass(slots=True)
class GlobalTTSState:
    state: str
    percent_busy: float | None = None
    percent_warning: float | None = None


@dataclass(eq=False, kw_only=True)
class FMMApplication(Entity, FlashlistUpdatable):
    """XDAQ application driving one or more FMM boards."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FMM_APPLICATION
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.JOB_CONTROL: (Derived(job_control_crashed),),
    }

    hostname: str
    port: int = 0

    _fmms: list[FMM] = owned()

    crashed: bool = periodic(default=False)

    @property
    def fmms(self) -> tuple[FMM, ...]:
        return tuple(self._fmms)

    def add_fmm(self, fmm: FMM) -> FMM:
        fmm._fmm_application = self  # pyright: ignore[reportPrivateUsage] # noqa: SLF001
        self._fmms.append(fmm)
        return fmm


@dataclass(eq=False, kw_only=True)
class FMM(Entity, FlashlistUpdatable):
    """Fast merging module; merges FED TTS inputs into outputs A and B."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.FMM
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.FMM_STATUS: (
            Overwrite("state", "stateName"),
            Overwrite("output_state_a", "outputStateA"),
            Overwrite("output_state_b", "outputStateB"),
            Overwrite("percent_busy_a", "outputFractionBusyA", ColumnKind.FLOAT, scale=100.0),
            Overwrite("percent_busy_b", "outputFractionBusyB", ColumnKind.FLOAT, scale=100.0),
            Overwrite(
                "percent_warning_a", "outputFractionWarningA", ColumnKind.FLOAT, scale=100.0
            ),
            Overwrite(
                "percent_warning_b", "outputFractionWarningB", ColumnKind.FLOAT, scale=100.0
            ),
        ),
    }

    geo_slot: int
    url: str | None = None
    dual: bool = False
    _fmm_application: FMMApplication | None = reference()
    feds: list[FED] = reference(default_factory=list)

    state: str | None = periodic()
    output_state_a: str | None = periodic()
    output_state_b: str | None = periodic()
    percent_busy_a: float = periodic(default=0.0)
    percent_busy_b: float = periodic(default=0.0)
    percent_warning_a: float = periodic(default=0.0)
    percent_warning_b: float = periodic(default=0.0)

    @property
    def fmm_application(self) -> FMMApplication | None:
        return self._fmm_application

    @property
    def hostname(self) -> str | None:
        return None if self._fmm_application is None else self._fmm_application.hostname

    def output(self, io: int) -> tuple[str | None, float, float]:
        """Return ``(state, percent_busy, percent_warning)`` of output A (io 0) or B."""

        if io == 0:
            return self.output_state_a, self.percent_busy_a, self.percent_warning_a
        return self.output_state_b, self.percent_busy_b, self.percent_warning_b


@dataclass(eq=False, kw_only=True)
class TTCPartition(Entity):
    """Trigger partition shared by the sub-FED-builders reading it out.

    Values are not matched from rows directly: the FMM output is copied in the
    derived pass and the TCDS states are set by the TTS channel handler.
    """

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TTC_PARTITION

    name: str
    ttc_id: int
    fmm: FMM | None = reference()
    fmm_io: int = 0
    tcds_info: TCDSPartitionInfo = field(default_factory=TCDSPartitionInfo)

    masked: bool = periodic(default=False)
    tts_state: str | None = periodic()
    percent_warning: float = periodic(default=0.0)
    percent_busy: float = periodic(default=0.0)
    tcds_pm_tts_state: str | None = periodic()
    tcds_apv_pm_tts_state: str | None = periodic()

    def calculate_derived_values(self, feds: list[FED]) -> None:
        if self.fmm is not None:
            self.tts_state, self.percent_busy, self.percent_warning = self.fmm.output(self.fmm_io)
        self.masked = bool(feds) and all(fed.fmm_masked for fed in feds)


def _deadtimes(_info: TCDSGlobalInfo, row: FlashlistRow) -> Mapping[str, object]:
    deadtimes = {
        column.removeprefix(DEADTIME_PREFIX): row.floating(column)
        for column in row.fields
        if column.startswith(DEADTIME_PREFIX)
    }
    return {"deadtimes": deadtimes}


def _action_counts(_info: TCDSGlobalInfo, row: FlashlistRow) -> Mapping[str, object]:
    counts = {
        column: row.integer(column)
        for column in row.fields
        if column not in _TCDS_KEY_COLUMNS and column.endswith(ACTION_COUNT_SUFFIXES)
    }
    return {"action_counts": counts}


@dataclass(eq=False, kw_only=True)
class TCDSGlobalInfo(Entity, FlashlistUpdatable):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.TCDS_GLOBAL_INFO
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.TCDS_CPM_COUNTS: (
            Overwrite("trg_cnt_total", "trg_cnt_total", ColumnKind.INTEGER),
            Overwrite("sup_trg_cnt_total", "sup_trg_cnt_total", ColumnKind.INTEGER),
        ),
        FlashlistType.TCDS_CPM_RATES: (
            Overwrite("trg_rate_total", "trg_rate_total", ColumnKind.FLOAT),
            Overwrite("sup_trg_rate_total", "sup_trg_rate_total", ColumnKind.FLOAT),
        ),
        FlashlistType.TCDS_CPM_DEADTIMES: (Derived(_deadtimes),),
        FlashlistType.TCDS_PM_ACTION_COUNTS: (Derived(_action_counts),),
    }

    tcds_controller_service_name: str | None = periodic()
    tcds_controller_context: str | None = periodic()
    trg_cnt_total: int = periodic(default=0)
    sup_trg_cnt_total: int = periodic(default=0)
    trg_rate_total: float = periodic(default=0.0)
    sup_trg_rate_total: float = periodic(default=0.0)
    deadtimes: dict[str, float] = periodic(default_factory=dict[str, float])
    action_counts: dict[str, int] = periodic(default_factory=dict[str, int])
    global_tts_states: dict[str, GlobalTTSState] = periodic(
        default_factory=dict[str, GlobalTTSState]
    )
