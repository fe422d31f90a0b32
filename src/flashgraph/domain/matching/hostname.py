"""Match rows to entities by the hostname embedded in a context column."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.flashlist import hostname_from_context

from .base import MatchResult

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from flashgraph.domain.flashlist import FlashlistRow

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HostnameMatcher:
    """Candidates are keyed by lower-cased hostname.

    Several rows resolving to one entity are fine; the last of them wins.
    """

    column: str = "context"

    def match[T](self, rows: Sequence[FlashlistRow], candidates: Mapping[str, T]) -> MatchResult[T]:
        result: MatchResult[T] = MatchResult()
        for row in rows:
            try:
                hostname = hostname_from_context(row.text(self.column))
            except MalformedRowError as exc:
                log.warning("Row %d has no usable %s: %s", row.index, self.column, exc)
                result.unmatched += 1
                continue
            entity = candidates.get(hostname)
            if entity is None:
                log.debug("No entity for hostname %s", hostname)
                result.unmatched += 1
                continue
            result.assign(entity, row)
            result.matched += 1
        return result
