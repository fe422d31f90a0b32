"""Match rows to entities by a plain key column (instance id, name)."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.flashlist import ColumnKind

from .base import MatchResult

if TYPE_CHECKING:
    from collections.abc import Hashable, Mapping, Sequence

    from flashgraph.domain.flashlist import FlashlistRow

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class KeyMatcher:
    """Look ``column`` (read as ``kind``) up in a key-indexed mapping of candidates."""

    column: str
    kind: ColumnKind = ColumnKind.TEXT

    def match[T](
        self, rows: Sequence[FlashlistRow], candidates: Mapping[Hashable, T]
    ) -> MatchResult[T]:
        result: MatchResult[T] = MatchResult()
        for row in rows:
            try:
                key = row.read(self.column, self.kind)
            except MalformedRowError as exc:
                log.warning("Row %d: cannot read %s: %s", row.index, self.column, exc)
                result.unmatched += 1
                continue
            entity = candidates.get(key)
            if entity is None:
                log.debug("No entity for %s=%r", self.column, key)
                result.unmatched += 1
                continue
            result.assign(entity, row)
            result.matched += 1
        return result


@dataclass(frozen=True, slots=True)
class InstanceMatcher(KeyMatcher):
    """Small integer instance ids; a non-numeric value is an unmatched row."""

    column: str = "instance"
    kind: ColumnKind = ColumnKind.INTEGER


@dataclass(frozen=True, slots=True)
class BroadcastMatcher:
    """Deliver rows to every candidate of a sequence pool.

    Used for singleton targets (the system root, the EVM, the TCDS summary).
    With ``first_row_only`` only the first row is delivered and the rest are
    counted unmatched; otherwise every row is delivered and the last one wins.
    """

    first_row_only: bool = False

    def match[T](self, rows: Sequence[FlashlistRow], candidates: Sequence[T]) -> MatchResult[T]:
        result: MatchResult[T] = MatchResult()
        if not candidates:
            result.unmatched = len(rows)
            return result
        delivered = rows[:1] if self.first_row_only else rows
        for row in delivered:
            for candidate in candidates:
                result.assign(candidate, row)
            result.matched += 1
        result.unmatched = len(rows) - len(delivered)
        if result.unmatched:
            log.warning("Ignoring %d extra rows for a single-row target", result.unmatched)
        return result
