from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from flashgraph import main as main_module
from tests.support.topology import L0_FILTER, LAS_DIR, TOPOLOGY_PATH

if TYPE_CHECKING:
    from pathlib import Path


def test_main_cli_passes_arguments_to_replay(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_replay(**kwargs: object) -> object:
        captured.update(kwargs)
        raise RuntimeError("stop here")

    monkeypatch.setenv("FLASHGRAPH_L0_FILTER", L0_FILTER)
    monkeypatch.setattr(main_module, "replay_cycles", fake_replay)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(
            [
                "replay",
                "--topology",
                str(TOPOLOGY_PATH),
                "--flashlists",
                str(LAS_DIR / "RU.json"),
                str(LAS_DIR / "jobcontrol.json"),
                "--cycles",
                "3",
            ]
        )

    assert excinfo.value.code == 1
    assert captured["topology_path"] == TOPOLOGY_PATH
    assert captured["flashlist_paths"] == [LAS_DIR / "RU.json", LAS_DIR / "jobcontrol.json"]
    assert captured["cycles"] == 3


def test_main_cli_writes_snapshot(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    output = tmp_path / "snapshot.json"
    monkeypatch.setenv("FLASHGRAPH_L0_FILTER", L0_FILTER)

    main_module.main(
        [
            "--log-level",
            "warning",
            "replay",
            "--topology",
            str(TOPOLOGY_PATH),
            "--flashlists",
            str(LAS_DIR / "levelZeroFM_dynamic.json"),
            "--output",
            str(output),
        ]
    )

    snapshot = json.loads(output.read_text(encoding="utf-8"))
    assert snapshot["@type"] == "daq"
    assert snapshot["level_zero_state"] == "Running"


def test_main_cli_prints_snapshot_to_stdout(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setenv("FLASHGRAPH_L0_FILTER", L0_FILTER)

    main_module.main(["replay", "--topology", str(TOPOLOGY_PATH), "--flashlists", "none.json"])

    assert json.loads(capsys.readouterr().out)["session_id"] == 4242


def test_main_cli_missing_configuration_exits_with_2() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main_module.main(
            ["replay", "--topology", str(TOPOLOGY_PATH), "--flashlists", "none.json"]
        )

    assert excinfo.value.code == 2


@pytest.mark.parametrize(
    "argv",
    [
        ["--log-level", "chatty", "replay", "--topology", "t.json", "--flashlists", "f.json"],
        ["replay", "--topology", "t.json", "--flashlists", "f.json", "--cycles", "0"],
    ],
)
def test_main_cli_invalid_arguments_exit_with_2(
    monkeypatch: pytest.MonkeyPatch, argv: list[str]
) -> None:
    monkeypatch.setenv("FLASHGRAPH_L0_FILTER", L0_FILTER)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(argv)

    assert excinfo.value.code == 2


def test_main_cli_bad_topology_exits_with_1(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("FLASHGRAPH_L0_FILTER", L0_FILTER)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(
            ["replay", "--topology", str(tmp_path / "absent.json"), "--flashlists", "f.json"]
        )

    assert excinfo.value.code == 1
