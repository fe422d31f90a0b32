"""TCDS partition manager TTS channels.

Rows of the TTS channel table are indexed by ``type`` (``tts_ici``,
``tts_apve`` or a global type), partition manager number and iCI number.
Partitions read their iCI and APVE states at their own position; every other
type carries one system-wide state at position (0, 0).
"""

from __future__ import annotations

from collections import defaultdict
from logging import getLogger
from typing import TYPE_CHECKING

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.model import GlobalTTSState

from .outcome import HandlerOutcome

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from flashgraph.domain.flashlist import FlashlistRow
    from flashgraph.domain.model import TopologyGraph, TTCPartition

    from .context import SessionContext

log = getLogger(__name__)

ICI_TYPE = "tts_ici"
APVE_TYPE = "tts_apve"
UNUSED_LABEL = "unused"
UNUSED_STATE = "x"
BUSY_FRACTION_COLUMN = "outputFractionBusy"
WARNING_FRACTION_COLUMN = "outputFractionWarning"

_TTS_STATES: Mapping[int, str] = {
    0: "DISCONNECTED",
    1: "WARNING",
    2: "OUT_OF_SYNC",
    4: "BUSY",
    8: "READY",
    12: "ERROR",
    15: "DISCONNECTED",
}

type ChannelTree = dict[str, dict[int, dict[int, FlashlistRow]]]


def decode_tts_state(code: int) -> str:
    return _TTS_STATES.get(code, f"UNKNOWN({code})")


def build_channel_tree(rows: Sequence[FlashlistRow]) -> tuple[ChannelTree, list[FlashlistRow]]:
    """Index rows by type, PM number and iCI number; return the tree and the unreadable rows."""

    tree: ChannelTree = defaultdict(lambda: defaultdict(dict))
    malformed: list[FlashlistRow] = []
    for row in rows:
        try:
            type_name = row.text("type")
            pm_nr = row.integer("pm_number")
            ici_nr = row.integer("ici_number")
        except MalformedRowError as exc:
            log.warning("TTS channel row %d skipped: %s", row.index, exc)
            malformed.append(row)
            continue
        tree[type_name][pm_nr][ici_nr] = row
    return tree, malformed


def _channel(tree: ChannelTree, type_name: str, pm_nr: int, ici_nr: int) -> FlashlistRow | None:
    return tree.get(type_name, {}).get(pm_nr, {}).get(ici_nr)


def _apply_partition(
    partition: TTCPartition, tree: ChannelTree, outcome: HandlerOutcome
) -> None:
    info = partition.tcds_info
    if info.null_cause is not None:
        partition.tcds_pm_tts_state = info.null_cause
        partition.tcds_apv_pm_tts_state = info.null_cause
        outcome.updated += 1
        return
    if info.pm_nr is None or info.ici_nr is None:
        return

    ici_row = _channel(tree, ICI_TYPE, info.pm_nr, info.ici_nr)
    apve_row = _channel(tree, APVE_TYPE, info.pm_nr, info.ici_nr)
    try:
        ici_state = None if ici_row is None else decode_tts_state(ici_row.integer("value"))
        apve_state = None
        if apve_row is not None:
            if str(apve_row.fields.get("label") or "").strip().lower() == UNUSED_LABEL:
                apve_state = UNUSED_STATE
            else:
                apve_state = decode_tts_state(apve_row.integer("value"))
    except MalformedRowError as exc:
        log.warning("TTS state of partition %s not updated: %s", partition.name, exc)
        outcome.failed += 1
        return

    if ici_row is not None:
        partition.tcds_pm_tts_state = ici_state
        outcome.matched_rows.add(ici_row.index)
    if apve_row is not None:
        partition.tcds_apv_pm_tts_state = apve_state
        outcome.matched_rows.add(apve_row.index)
    if ici_row is not None or apve_row is not None:
        outcome.updated += 1


def _global_state(row: FlashlistRow) -> GlobalTTSState:
    state = GlobalTTSState(state=decode_tts_state(row.integer("value")))
    if row.fields.get(BUSY_FRACTION_COLUMN) is not None:
        state.percent_busy = row.floating(BUSY_FRACTION_COLUMN)
    if row.fields.get(WARNING_FRACTION_COLUMN) is not None:
        state.percent_warning = row.floating(WARNING_FRACTION_COLUMN)
    return state


def apply_tts_channels(
    rows: Sequence[FlashlistRow], graph: TopologyGraph, session: SessionContext
) -> HandlerOutcome:
    """Set partition TCDS states and the global TTS states from the configured service's rows."""

    outcome = HandlerOutcome()
    tree, _malformed = build_channel_tree(rows)
    for partition in graph.ttc_partitions():
        _apply_partition(partition, tree, outcome)

    info = graph.daq.tcds_global_info
    global_states: dict[str, GlobalTTSState] = {}
    for type_name, by_pm in tree.items():
        if type_name in (ICI_TYPE, APVE_TYPE):
            continue
        row = by_pm.get(0, {}).get(0)
        if row is None:
            log.debug("Global TTS type %s has no channel at position (0, 0)", type_name)
            continue
        try:
            global_states[type_name] = _global_state(row)
        except MalformedRowError as exc:
            log.warning("Global TTS state %s not updated: %s", type_name, exc)
            outcome.failed += 1
            continue
        outcome.matched_rows.add(row.index)
        outcome.updated += 1

    info.global_tts_states = global_states
    info.tcds_controller_service_name = session.tcds_service
    info.tcds_controller_context = session.tcds_url
    return outcome
