"""Typed access to the named columns of one flashlist row.

Rows arrive as loosely typed mappings: the live access service serialises most
scalars as strings, nested tables as ``{"definition": ..., "rows": [...]}`` objects
and vectors as JSON arrays. Every getter coerces to the requested kind or raises
``MalformedRowError`` so that a bad value never escapes the row that carried it.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import cast

from flashgraph.domain.errors import MalformedRowError

_TRUE_TEXT = frozenset({"true", "1", "yes", "on"})
_FALSE_TEXT = frozenset({"false", "0", "no", "off"})


class ColumnKind(StrEnum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    LIST = "list"
    TABLE = "table"


@dataclass(frozen=True, slots=True)
class FlashlistRow:
    """One row of a flashlist; ``index`` is its position within the table."""

    fields: Mapping[str, object] = field(default_factory=dict[str, object])
    index: int = 0

    def __contains__(self, column: object) -> bool:
        return column in self.fields

    def raw(self, column: str) -> object:
        try:
            value = self.fields[column]
        except KeyError:
            raise MalformedRowError(column, "missing") from None
        if value is None:
            raise MalformedRowError(column, "null")
        return value

    def read(self, column: str, kind: ColumnKind) -> object:
        """Read ``column`` coerced to ``kind``."""

        match kind:
            case ColumnKind.TEXT:
                return self.text(column)
            case ColumnKind.INTEGER:
                return self.integer(column)
            case ColumnKind.FLOAT:
                return self.floating(column)
            case ColumnKind.BOOLEAN:
                return self.boolean(column)
            case ColumnKind.TIMESTAMP:
                return self.timestamp(column)
            case ColumnKind.LIST:
                return self.sequence(column)
            case ColumnKind.TABLE:
                return self.table(column)

    def text(self, column: str) -> str:
        value = self.raw(column)
        if isinstance(value, str):
            return value
        if isinstance(value, bool | int | float):
            return str(value)
        raise MalformedRowError(column, f"expected text, got {type(value).__name__}")

    def integer(self, column: str) -> int:
        return _to_int(column, self.raw(column))

    def floating(self, column: str) -> float:
        return _to_float(column, self.raw(column))

    def boolean(self, column: str) -> bool:
        value = self.raw(column)
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in _TRUE_TEXT:
                return True
            if lowered in _FALSE_TEXT:
                return False
        raise MalformedRowError(column, f"expected boolean, got {value!r}")

    def timestamp(self, column: str) -> str:
        """Timestamps are opaque markers compared for equality only."""

        text = self.text(column).strip()
        if not text:
            raise MalformedRowError(column, "empty timestamp")
        return text

    def sequence(self, column: str) -> list[object]:
        value = self.raw(column)
        if isinstance(value, Mapping) and "rows" in value:
            value = cast(Mapping[str, object], value)["rows"]
        if isinstance(value, Sequence) and not isinstance(value, str | bytes):
            return list(cast(Sequence[object], value))
        raise MalformedRowError(column, f"expected list, got {type(value).__name__}")

    def integers(self, column: str) -> list[int]:
        return [_to_int(column, item) for item in self.sequence(column)]

    def floats(self, column: str) -> list[float]:
        return [_to_float(column, item) for item in self.sequence(column)]

    def table(self, column: str) -> tuple[FlashlistRow, ...]:
        """Nested table rows (for example the job table of the job control flashlist)."""

        rows: list[FlashlistRow] = []
        for position, item in enumerate(self.sequence(column)):
            if not isinstance(item, Mapping):
                raise MalformedRowError(column, f"nested row {position} is not a mapping")
            rows.append(FlashlistRow(fields=cast(Mapping[str, object], item), index=position))
        return tuple(rows)


def _to_int(column: str, value: object) -> int:
    if isinstance(value, bool):
        raise MalformedRowError(column, "expected integer, got boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise MalformedRowError(column, f"expected integer, got {value!r}")
    if isinstance(value, str):
        stripped = value.strip()
        try:
            return int(stripped)
        except ValueError:
            pass
        try:
            as_float = float(stripped)
        except ValueError:
            raise MalformedRowError(column, f"expected integer, got {value!r}") from None
        if as_float.is_integer():
            return int(as_float)
    raise MalformedRowError(column, f"expected integer, got {value!r}")


def _to_float(column: str, value: object) -> float:
    if isinstance(value, bool):
        raise MalformedRowError(column, "expected number, got boolean")
    if isinstance(value, int | float):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise MalformedRowError(column, f"expected number, got {value!r}") from None
    raise MalformedRowError(column, f"expected number, got {value!r}")
