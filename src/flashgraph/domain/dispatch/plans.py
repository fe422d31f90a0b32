"""Routing plans: which pools and matchers each flashlist type goes through."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from flashgraph.domain.flashlist import FlashlistType
from flashgraph.domain.matching import (
    BroadcastMatcher,
    FedFromFerolInputStreamGeoFinder,
    FedInFmmGeoFinder,
    FedInFrl40GeoFinder,
    FedInFrlGeoFinder,
    FMMGeoFinder,
    FRLGeoFinder,
    GeoMatcher,
    HostnameMatcher,
    KeyMatcher,
    MembershipMatcher,
)
from flashgraph.domain.model import RU_ERROR_FIELDS, Pool

from . import filters
from .tcds import apply_tts_channels

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from flashgraph.domain.flashlist import FlashlistRow
    from flashgraph.domain.matching import GeoFinder, Matcher
    from flashgraph.domain.model import DAQ, TopologyGraph

    from .context import SessionContext
    from .outcome import HandlerOutcome

type RowFilter = Callable[[FlashlistRow, DAQ, SessionContext], bool]

RU_FED_IDS_KEY = "RU:fedIds"
SESSION_ID_ORDER = 0
DEFAULT_ORDER = 1


type Handler = Callable[[Sequence[FlashlistRow], TopologyGraph, SessionContext], HandlerOutcome]


@dataclass(frozen=True, slots=True)
class RouteStep:
    """Match the rows against one pool.

    ``report_as`` accounts the step under its own reporter key instead of the
    flashlist type; ``clear`` names periodic fields reset on every pool entity
    whenever the table is retrieved, empty or not, for values only set by
    presence in a row.
    """

    pool: Pool
    matcher: Matcher
    report_as: str | None = None
    clear: tuple[str, ...] = ()
    row_filter: RowFilter | None = None


@dataclass(frozen=True, slots=True)
class DispatchPlan:
    steps: tuple[RouteStep, ...] = ()
    row_filter: RowFilter | None = None
    handler: Handler | None = None
    requires_tcds: bool = False
    expect_single_row: bool = False
    order: int = DEFAULT_ORDER

    @property
    def routed(self) -> bool:
        return bool(self.steps) or self.handler is not None


def _geo(pool: Pool, finder: GeoFinder) -> tuple[RouteStep, ...]:
    return (RouteStep(pool, GeoMatcher(finder)),)


_FRL_PC_STEP = RouteStep(Pool.FRL_PCS_BY_HOSTNAME, HostnameMatcher())

_TCDS_SUMMARY_PLAN = DispatchPlan(
    steps=(RouteStep(Pool.TCDS_GLOBAL_INFO, BroadcastMatcher(first_row_only=True)),),
    row_filter=filters.tcds_service,
    requires_tcds=True,
)

DEFAULT_PLANS: Mapping[FlashlistType, DispatchPlan] = {
    FlashlistType.RU: DispatchPlan(
        steps=(
            RouteStep(Pool.RUS_BY_HOSTNAME, HostnameMatcher()),
            RouteStep(
                Pool.FEDS_BY_EXPECTED_ID,
                MembershipMatcher(),
                report_as=RU_FED_IDS_KEY,
                clear=RU_ERROR_FIELDS,
            ),
        )
    ),
    FlashlistType.EVM: DispatchPlan(
        steps=(RouteStep(Pool.EVMS, BroadcastMatcher()),),
        expect_single_row=True,
    ),
    FlashlistType.BU: DispatchPlan(steps=(RouteStep(Pool.BUS_BY_HOSTNAME, HostnameMatcher()),)),
    FlashlistType.JOB_CONTROL: DispatchPlan(
        steps=(
            RouteStep(Pool.FRL_PCS_BY_HOSTNAME, HostnameMatcher()),
            RouteStep(Pool.FMM_APPLICATIONS_BY_HOSTNAME, HostnameMatcher()),
            RouteStep(Pool.RUS_BY_HOSTNAME, HostnameMatcher()),
            RouteStep(Pool.BUS_BY_HOSTNAME, HostnameMatcher()),
        )
    ),
    FlashlistType.FEROL_INPUT_STREAM: DispatchPlan(
        steps=_geo(Pool.FEDS, FedFromFerolInputStreamGeoFinder())
    ),
    FlashlistType.FEROL40_INPUT_STREAM: DispatchPlan(steps=_geo(Pool.FEDS, FedInFrl40GeoFinder())),
    FlashlistType.FMM_INPUT: DispatchPlan(steps=_geo(Pool.FEDS, FedInFmmGeoFinder())),
    FlashlistType.FEROL_STATUS: DispatchPlan(steps=_geo(Pool.FRLS, FRLGeoFinder())),
    FlashlistType.FEROL40_STATUS: DispatchPlan(steps=_geo(Pool.FRLS, FRLGeoFinder())),
    FlashlistType.FEROL_CONFIGURATION: DispatchPlan(
        steps=(*_geo(Pool.FEDS, FedInFrlGeoFinder("io")), _FRL_PC_STEP)
    ),
    FlashlistType.FEROL40_STREAM_CONFIGURATION: DispatchPlan(
        steps=_geo(Pool.FEDS, FedInFrl40GeoFinder())
    ),
    FlashlistType.FMM_STATUS: DispatchPlan(steps=_geo(Pool.FMMS, FMMGeoFinder())),
    FlashlistType.LEVEL_ZERO_FM_DYNAMIC: DispatchPlan(
        steps=(RouteStep(Pool.DAQ, BroadcastMatcher()),),
        row_filter=filters.level_zero_url,
        order=SESSION_ID_ORDER,
    ),
    FlashlistType.LEVEL_ZERO_FM_SUBSYS: DispatchPlan(
        steps=(
            RouteStep(Pool.DAQ, BroadcastMatcher(), row_filter=filters.daq_subsystem),
            RouteStep(Pool.SUBSYSTEMS_BY_NAME, KeyMatcher("SUBSYS")),
        ),
        row_filter=filters.current_session_id,
    ),
    FlashlistType.TCDS_PM_TTS_CHANNEL: DispatchPlan(
        row_filter=filters.tcds_service,
        handler=apply_tts_channels,
        requires_tcds=True,
    ),
    FlashlistType.TCDS_CPM_COUNTS: _TCDS_SUMMARY_PLAN,
    FlashlistType.TCDS_CPM_DEADTIMES: _TCDS_SUMMARY_PLAN,
    FlashlistType.TCDS_CPM_RATES: _TCDS_SUMMARY_PLAN,
    FlashlistType.TCDS_PM_ACTION_COUNTS: _TCDS_SUMMARY_PLAN,
    # matched for the reporter only; no FRL PC field comes from these tables
    FlashlistType.FRL_MONITORING: DispatchPlan(steps=(_FRL_PC_STEP,)),
    FlashlistType.FEROL40_CONFIGURATION: DispatchPlan(steps=(_FRL_PC_STEP,)),
    # recognised; nothing in the graph consumes it
    FlashlistType.LEVEL_ZERO_FM_STATIC: DispatchPlan(),
}
