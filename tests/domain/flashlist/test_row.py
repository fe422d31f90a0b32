from __future__ import annotations

import pytest

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.flashlist import ColumnKind, FlashlistRow
from tests.support.topology import job_table, row


def test_integer_accepts_numeric_strings_and_integral_floats() -> None:
    record = row(a="42", b=" 7 ", c=3.0, d="5.0")

    assert record.integer("a") == 42
    assert record.integer("b") == 7
    assert record.integer("c") == 3
    assert record.integer("d") == 5


@pytest.mark.parametrize("value", ["abc", 2.5, True, [1]])
def test_integer_rejects_non_integral_values(value: object) -> None:
    with pytest.raises(MalformedRowError) as excinfo:
        row(value=value).integer("value")

    assert excinfo.value.column == "value"


def test_missing_and_null_columns_are_malformed() -> None:
    record = row(present=None)

    with pytest.raises(MalformedRowError, match="missing"):
        record.text("absent")
    with pytest.raises(MalformedRowError, match="null"):
        record.text("present")


def test_boolean_understands_textual_flags() -> None:
    record = row(yes="true", no="FALSE", one=1, flag=False)

    assert record.boolean("yes") is True
    assert record.boolean("no") is False
    assert record.boolean("one") is True
    assert record.boolean("flag") is False
    with pytest.raises(MalformedRowError):
        row(maybe="perhaps").boolean("maybe")


def test_sequence_reads_plain_and_nested_table_vectors() -> None:
    record = row(plain=["1", 2], nested={"definition": [], "rows": [3, "4"]})

    assert record.integers("plain") == [1, 2]
    assert record.integers("nested") == [3, 4]
    with pytest.raises(MalformedRowError, match="expected list"):
        row(text="1,2").sequence("text")


def test_table_returns_indexed_rows() -> None:
    jobs = row(jobTable=job_table("alive", "killed")).table("jobTable")

    assert [job.index for job in jobs] == [0, 1]
    assert jobs[1].text("status") == "killed"


def test_table_rejects_non_mapping_rows() -> None:
    with pytest.raises(MalformedRowError, match="not a mapping"):
        row(jobTable={"rows": ["alive"]}).table("jobTable")


def test_read_dispatches_on_kind() -> None:
    record = FlashlistRow(fields={"rate": "1.5", "ts": " 2024-05-01 10:00:00 "})

    assert record.read("rate", ColumnKind.FLOAT) == 1.5
    assert record.read("ts", ColumnKind.TIMESTAMP) == "2024-05-01 10:00:00"
    assert "rate" in record
    assert "other" not in record
