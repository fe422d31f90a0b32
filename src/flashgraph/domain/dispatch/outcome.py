"""Dispatch results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from flashgraph.domain.flashlist import FlashlistType


@dataclass(slots=True)
class HandlerOutcome:
    """Result of a custom handler that writes entity state directly."""

    matched_rows: set[int] = field(default_factory=set[int])
    updated: int = 0
    failed: int = 0


@dataclass(slots=True)
class DispatchOutcome:
    """What happened to one flashlist.

    ``rows`` counts every delivered row; filtered rows are excluded from the
    match accounting, so ``matched + unmatched == rows - filtered`` whenever the
    flashlist was dispatched at all. ``skipped`` names the reason otherwise.
    """

    name: str
    flashlist_type: FlashlistType | None
    rows: int = 0
    filtered: int = 0
    matched: int = 0
    unmatched: int = 0
    updated: int = 0
    failed: int = 0
    skipped: str | None = None

    @property
    def dispatched(self) -> bool:
        return self.skipped is None
