"""Common result type and contract of the row-to-entity matchers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from flashgraph.domain.flashlist import FlashlistRow


@dataclass(slots=True)
class MatchResult[T]:
    """Correspondences found by one matcher run.

    ``assignments`` keeps insertion order; an entity appears once with the row
    that finally applies to it. ``matched_rows`` holds the indices of rows that
    resolved to at least one entity and lets callers combine several runs over
    the same table.
    """

    assignments: dict[T, FlashlistRow] = field(default_factory=dict)
    matched: int = 0
    unmatched: int = 0
    matched_rows: set[int] = field(default_factory=set[int])

    def assign(self, entity: T, row: FlashlistRow) -> None:
        # an entity keeps its first position; the last row assigned to it wins
        self.assignments[entity] = row
        self.matched_rows.add(row.index)


class Matcher(Protocol):
    def match(self, rows: Sequence[FlashlistRow], candidates: Any) -> MatchResult[Any]: ...
