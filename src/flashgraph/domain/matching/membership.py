"""Fan-out matching through list-valued id columns.

One row names many entities (for example every FED a readout unit reports in
error). An entity listed in more than one column of the same row receives that
row once.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from flashgraph.domain.errors import MalformedRowError

from .base import MatchResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from flashgraph.domain.flashlist import FlashlistRow

log = getLogger(__name__)

DEFAULT_ID_COLUMNS = ("fedIdsWithErrors", "fedIdsWithoutFragments")


@dataclass(frozen=True, slots=True)
class MembershipMatcher:
    """``matched`` counts distinct entities reached, ``unmatched`` unresolved ids.

    A row whose id columns cannot be read counts as one unmatched reference.
    """

    columns: tuple[str, ...] = DEFAULT_ID_COLUMNS

    def match[T](self, rows: Sequence[FlashlistRow], candidates: Mapping[int, T]) -> MatchResult[T]:
        result: MatchResult[T] = MatchResult()
        reached: set[int] = set()
        for row in rows:
            try:
                ids = [entity_id for column in self.columns for entity_id in row.integers(column)]
            except MalformedRowError as exc:
                log.warning("Row %d: cannot read id lists: %s", row.index, exc)
                result.unmatched += 1
                continue
            delivered: set[int] = set()
            for entity_id in ids:
                entity = candidates.get(entity_id)
                if entity is None:
                    log.debug("Id %d listed in row %d resolves to no entity", entity_id, row.index)
                    result.unmatched += 1
                    continue
                if id(entity) in delivered:
                    continue
                delivered.add(id(entity))
                reached.add(id(entity))
                result.assign(entity, row)
        result.matched = len(reached)
        return result
