"""Event builder entities: readout units (one of them the EVM) and builder units."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.flashlist import (
    ColumnKind,
    FlashlistRow,
    FlashlistType,
    port_from_context,
)
from flashgraph.domain.model.entity import Entity, periodic, reference
from flashgraph.domain.model.enums import EntityType
from flashgraph.domain.updates import (
    Derived,
    FlashlistUpdatable,
    Overwrite,
    UpdatePlan,
    job_control_crashed,
)

if TYPE_CHECKING:
    from collections.abc import Iterator

    from flashgraph.domain.model.readout import FED, FEDBuilder

_PER_BU_COLUMNS: tuple[tuple[str, str], ...] = (
    ("throughput_per_bu", "throughputPerBU"),
    ("bu_tids", "buTids"),
    ("fragment_rate_per_bu", "fragmentRatePerBU"),
    ("retry_rate_per_bu", "retryRatePerBU"),
)


def _context_port(_entity: object, row: FlashlistRow) -> Mapping[str, object]:
    if "context" not in row:
        return {}
    port = port_from_context(row.text("context"))
    return {} if port is None else {"port": port}


def _ru_throughput(_ru: RU, row: FlashlistRow) -> Mapping[str, object]:
    return {"throughput": row.floating("eventRate") * row.floating("superFragmentSize")}


def _ru_per_bu_lists(_ru: RU, row: FlashlistRow) -> Mapping[str, object]:
    """The four per-BU vectors are replaced together and must stay index-aligned."""

    values: dict[str, list[float] | list[int]] = {
        "throughput_per_bu": row.floats("throughputPerBU"),
        "bu_tids": row.integers("buTids"),
        "fragment_rate_per_bu": row.floats("fragmentRatePerBU"),
        "retry_rate_per_bu": row.floats("retryRatePerBU"),
    }
    if len({len(value) for value in values.values()}) > 1:
        detail = ", ".join(f"{column}={len(values[attr])}" for attr, column in _PER_BU_COLUMNS)
        raise MalformedRowError("buTids", f"per-BU lists differ in length ({detail})")
    return values


_RU_TABLE_PLAN: UpdatePlan = (
    Overwrite("state_name", "stateName"),
    Overwrite("error_msg", "errorMsg"),
    Overwrite("requests", "activeRequests", ColumnKind.INTEGER),
    Overwrite("rate", "eventRate", ColumnKind.FLOAT),
    Overwrite("events_in_ru", "eventsInRU", ColumnKind.INTEGER),
    Overwrite("event_count", "eventCount", ColumnKind.INTEGER),
    Overwrite("super_fragment_size_mean", "superFragmentSize", ColumnKind.FLOAT),
    Overwrite("super_fragment_size_stddev", "superFragmentSizeStdDev", ColumnKind.FLOAT),
    Overwrite(
        "incomplete_super_fragment_count",
        "incompleteSuperFragmentCount",
        ColumnKind.INTEGER,
    ),
    Overwrite("fragments_in_ru", "fragmentCount", ColumnKind.INTEGER),
    Derived(_ru_throughput),
    Derived(_ru_per_bu_lists),
    Derived(_context_port),
)


@dataclass(eq=False, kw_only=True)
class RU(Entity, FlashlistUpdatable):
    """Readout unit; ``is_evm`` marks the event manager, which reads the EVM table."""

    ENTITY_TYPE: ClassVar[EntityType] = EntityType.RU
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.RU: _RU_TABLE_PLAN,
        FlashlistType.EVM: (
            *_RU_TABLE_PLAN,
            Overwrite("allocate_rate", "allocateRate", ColumnKind.FLOAT),
            Overwrite("allocate_retry_rate", "allocateRetryRate", ColumnKind.FLOAT),
        ),
        FlashlistType.JOB_CONTROL: (Derived(job_control_crashed),),
    }

    hostname: str
    port: int = 0
    instance: int | None = None
    is_evm: bool = False
    _fed_builder: FEDBuilder | None = reference()

    masked: bool = periodic(default=False)
    crashed: bool = periodic(default=False)
    state_name: str | None = periodic()
    error_msg: str | None = periodic()
    rate: float = periodic(default=0.0)
    throughput: float = periodic(default=0.0)
    super_fragment_size_mean: float = periodic(default=0.0)
    super_fragment_size_stddev: float = periodic(default=0.0)
    fragments_in_ru: int = periodic(default=0)
    events_in_ru: int = periodic(default=0)
    event_count: int = periodic(default=0)
    requests: int = periodic(default=0)
    incomplete_super_fragment_count: int = periodic(default=0)
    throughput_per_bu: list[float] = periodic(default_factory=list[float])
    bu_tids: list[int] = periodic(default_factory=list[int])
    fragment_rate_per_bu: list[float] = periodic(default_factory=list[float])
    retry_rate_per_bu: list[float] = periodic(default_factory=list[float])
    allocate_rate: float = periodic(default=0.0)
    allocate_retry_rate: float = periodic(default=0.0)

    @property
    def fed_builder(self) -> FEDBuilder | None:
        return self._fed_builder

    def accepts(self, flashlist_type: FlashlistType) -> bool:
        # the EVM reports through its own table
        if self.is_evm and flashlist_type is FlashlistType.RU:
            return False
        return super().accepts(flashlist_type)

    def iter_feds(self) -> Iterator[FED]:
        if self._fed_builder is None:
            return iter(())
        return self._fed_builder.iter_feds()

    def calculate_derived_values(self) -> None:
        """Masked only when every FED feeding this unit is FRL-masked."""

        feds = list(self.iter_feds())
        self.masked = bool(feds) and all(fed.frl_masked for fed in feds)


@dataclass(eq=False, kw_only=True)
class BU(Entity, FlashlistUpdatable):
    ENTITY_TYPE: ClassVar[EntityType] = EntityType.BU
    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {
        FlashlistType.BU: (
            Overwrite("state_name", "stateName"),
            Overwrite("error_msg", "errorMsg"),
            Overwrite("rate", "eventRate", ColumnKind.FLOAT),
            Overwrite("throughput", "bandwidth", ColumnKind.FLOAT),
            Overwrite("event_size_mean", "eventSize", ColumnKind.FLOAT),
            Overwrite("event_size_stddev", "eventSizeStdDev", ColumnKind.FLOAT),
            Overwrite("num_events", "nbEventsBuilt", ColumnKind.INTEGER),
            Overwrite("num_events_in_bu", "nbEventsInBU", ColumnKind.INTEGER),
            Overwrite("num_requests_sent", "requestsSent", ColumnKind.INTEGER),
            Overwrite("num_requests_used", "requestsUsed", ColumnKind.INTEGER),
            Overwrite("num_requests_blocked", "requestsBlocked", ColumnKind.INTEGER),
            Overwrite("num_fus_hlt", "fuSlotsHLT", ColumnKind.INTEGER),
            Overwrite("num_fus_crashed", "fuSlotsCrashed", ColumnKind.INTEGER),
            Overwrite("num_fus_stale", "fuSlotsStale", ColumnKind.INTEGER),
            Overwrite("num_fus_cloud", "fuSlotsCloud", ColumnKind.INTEGER),
            Overwrite("ram_disk_usage", "ramDiskUsed", ColumnKind.FLOAT),
            Overwrite("ram_disk_total", "ramDiskSizeInGB", ColumnKind.FLOAT),
            Overwrite("num_files", "nbFilesWritten", ColumnKind.INTEGER),
            Overwrite("current_lumisection", "currentLumiSection", ColumnKind.INTEGER),
            Derived(_context_port),
        ),
        FlashlistType.JOB_CONTROL: (Derived(job_control_crashed),),
    }

    hostname: str
    port: int = 0
    instance: int | None = None

    crashed: bool = periodic(default=False)
    state_name: str | None = periodic()
    error_msg: str | None = periodic()
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
    current_lumisection: int = periodic(default=0)
