"""Container for one retrieved flashlist table."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .row import FlashlistRow

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping
    from datetime import datetime

    from .types import FlashlistType


@dataclass(frozen=True, slots=True)
class ColumnDefinition:
    key: str
    type: str


@dataclass(slots=True)
class Flashlist:
    """A named table of rows delivered for one cycle.

    ``flashlist_type`` is ``None`` for tables the registry does not know;
    ``unknown_at_source`` marks tables the retrieval side could not download.
    """

    name: str
    flashlist_type: FlashlistType | None
    rows: tuple[FlashlistRow, ...] = ()
    definition: tuple[ColumnDefinition, ...] = ()
    unknown_at_source: bool = False
    retrieved_at: datetime | None = None

    @classmethod
    def from_rows(
        cls,
        flashlist_type: FlashlistType,
        rows: Iterable[Mapping[str, object]],
        *,
        name: str | None = None,
        definition: Iterable[ColumnDefinition] = (),
        retrieved_at: datetime | None = None,
    ) -> Flashlist:
        return cls(
            name=name or flashlist_type.flashlist_name,
            flashlist_type=flashlist_type,
            rows=tuple(
                FlashlistRow(fields=row, index=position) for position, row in enumerate(rows)
            ),
            definition=tuple(definition),
            retrieved_at=retrieved_at,
        )

    @classmethod
    def unavailable(cls, name: str, flashlist_type: FlashlistType | None) -> Flashlist:
        return cls(name=name, flashlist_type=flashlist_type, unknown_at_source=True)

    @property
    def is_empty(self) -> bool:
        return not self.rows
