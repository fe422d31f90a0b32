from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from flashgraph.domain.dispatch import build_channel_tree, decode_tts_state
from flashgraph.domain.flashlist import FlashlistType
from tests.support.topology import TCDS_SERVICE, TCDS_URL, flashlist, rows

if TYPE_CHECKING:
    from flashgraph.domain.dispatch import FlashlistDispatcher
    from flashgraph.domain.model import TopologyGraph


@pytest.mark.parametrize(
    ("code", "state"),
    [
        (0, "DISCONNECTED"),
        (1, "WARNING"),
        (2, "OUT_OF_SYNC"),
        (4, "BUSY"),
        (8, "READY"),
        (12, "ERROR"),
        (15, "DISCONNECTED"),
        (3, "UNKNOWN(3)"),
    ],
)
def test_decode_tts_state(code: int, state: str) -> None:
    assert decode_tts_state(code) == state


def test_channel_tree_indexes_by_type_and_position() -> None:
    tree, malformed = build_channel_tree(
        rows(
            {"type": "tts_ici", "pm_number": 1, "ici_number": 2, "value": 8},
            {"type": "tts_ici", "pm_number": "1", "ici_number": "3", "value": 4},
            {"type": "tts_ici", "pm_number": "one", "ici_number": 3, "value": 4},
        )
    )

    assert tree["tts_ici"][1][2].index == 0
    assert tree["tts_ici"][1][3].index == 1
    assert [row.index for row in malformed] == [2]


def _channel(type_name: str, pm: int, ici: int, value: int, **extra: object) -> dict[str, object]:
    return {
        "service": TCDS_SERVICE,
        "type": type_name,
        "pm_number": pm,
        "ici_number": ici,
        "value": value,
        **extra,
    }


def test_tts_channels_update_partitions_and_global_states(
    dispatcher: FlashlistDispatcher, graph: TopologyGraph
) -> None:
    outcome = dispatcher.dispatch(
        flashlist(
            FlashlistType.TCDS_PM_TTS_CHANNEL,
            _channel("tts_ici", 1, 2, 8, label="TIBTID"),
            _channel("tts_apve", 1, 2, 0, label="unused"),
            _channel("tts_ici", 1, 3, 4),
            _channel("tts_pm", 0, 0, 4, outputFractionBusy=0.5, outputFractionWarning=0.1),
            {**_channel("tts_ici", 1, 2, 12), "service": "tcds-cpm-sec"},
        )
    )

    by_name = {partition.name: partition for partition in graph.ttc_partitions()}
    info = graph.daq.tcds_global_info
    assert (outcome.filtered, outcome.matched, outcome.unmatched) == (1, 3, 1)
    assert by_name["TIBTID"].tcds_pm_tts_state == "READY"
    assert by_name["TIBTID"].tcds_apv_pm_tts_state == "x"
    assert by_name["CSC+"].tcds_pm_tts_state == "not in TCDS"
    assert by_name["CSC+"].tcds_apv_pm_tts_state == "not in TCDS"
    assert info.global_tts_states["tts_pm"].state == "BUSY"
    assert info.global_tts_states["tts_pm"].percent_busy == 0.5
    assert info.tcds_controller_service_name == TCDS_SERVICE
    assert info.tcds_controller_context == TCDS_URL


def test_unreadable_channel_value_is_a_failure(
    dispatcher: FlashlistDispatcher, graph: TopologyGraph
) -> None:
    unreadable = {**_channel("tts_ici", 1, 2, 0), "value": "n/a"}

    outcome = dispatcher.dispatch(flashlist(FlashlistType.TCDS_PM_TTS_CHANNEL, unreadable))

    tibtid = next(p for p in graph.ttc_partitions() if p.name == "TIBTID")
    assert outcome.failed == 1
    assert outcome.unmatched == 1
    assert tibtid.tcds_pm_tts_state is None


def test_global_tts_states_only_hold_types_in_the_latest_table(
    dispatcher: FlashlistDispatcher, graph: TopologyGraph
) -> None:
    dispatcher.dispatch(
        flashlist(
            FlashlistType.TCDS_PM_TTS_CHANNEL,
            _channel("tts_pm", 0, 0, 4),
            _channel("tts_cpm", 0, 0, 8),
        )
    )

    dispatcher.dispatch(flashlist(FlashlistType.TCDS_PM_TTS_CHANNEL, _channel("tts_pm", 0, 0, 8)))

    states = graph.daq.tcds_global_info.global_tts_states
    assert set(states) == {"tts_pm"}
    assert states["tts_pm"].state == "READY"
