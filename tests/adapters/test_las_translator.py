from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from flashgraph.adapters.las import load_flashlist, parse_flashlist
from flashgraph.domain.flashlist import FlashlistType
from tests.support.topology import LAS_DIR


def test_load_flashlist_builds_rows_and_definition() -> None:
    flashlist = load_flashlist(LAS_DIR / "RU.json")

    assert flashlist.flashlist_type is FlashlistType.RU
    assert flashlist.name == "urn:xdaq-flashlist:RU"
    assert len(flashlist.rows) == 1
    assert flashlist.rows[0].integers("fedIdsWithErrors") == [1202]
    assert [column.key for column in flashlist.definition][:2] == ["context", "stateName"]
    assert flashlist.retrieved_at == datetime(2024, 5, 1, 10, 0, tzinfo=UTC)


def test_nested_tables_survive_translation() -> None:
    flashlist = load_flashlist(LAS_DIR / "jobcontrol.json")

    assert flashlist.flashlist_type is FlashlistType.JOB_CONTROL
    assert flashlist.retrieved_at is None
    jobs = flashlist.rows[1].table("jobTable")
    assert jobs[0].text("status") == "killed"


def test_null_rows_mean_an_empty_table() -> None:
    flashlist = load_flashlist(LAS_DIR / "FMMStatus.json")

    assert flashlist.flashlist_type is FlashlistType.FMM_STATUS
    assert flashlist.is_empty
    assert not flashlist.unknown_at_source


def test_unreadable_file_becomes_unavailable_flashlist() -> None:
    flashlist = load_flashlist(LAS_DIR / "FMMInput.json")

    assert flashlist.unknown_at_source
    assert flashlist.flashlist_type is FlashlistType.FMM_INPUT


def test_missing_file_becomes_unavailable_flashlist() -> None:
    flashlist = load_flashlist(LAS_DIR / "does-not-exist.json")

    assert flashlist.unknown_at_source
    assert flashlist.flashlist_type is None


def test_parse_flashlist_keeps_unknown_tables_untyped() -> None:
    flashlist = parse_flashlist(
        {"table": {"properties": {"Name": "urn:xdaq-flashlist:hltd"}, "rows": [{"a": 1}]}}
    )

    assert flashlist.flashlist_type is None
    assert flashlist.rows[0].integer("a") == 1


def test_parse_flashlist_rejects_payload_without_table() -> None:
    with pytest.raises(ValidationError):
        parse_flashlist({"rows": []})
