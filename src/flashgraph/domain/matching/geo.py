"""Match rows to entities by structural position.

A ``GeoFinder`` knows which columns of a table describe a position (crate
host, slot, input) and how to compute the same key from an entity's static
place in the topology. Candidate keys are indexed once per match call.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from flashgraph.domain.errors import MalformedRowError
from flashgraph.domain.flashlist import hostname_from_context

from .base import MatchResult

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterable, Sequence

    from flashgraph.domain.flashlist import FlashlistRow
    from flashgraph.domain.model import FED, FMM, FRL

log = getLogger(__name__)

type GeoKey = tuple[Hashable, ...]


class GeoFinder(Protocol):
    def row_key(self, row: FlashlistRow) -> GeoKey: ...

    def entity_key(self, entity: Any) -> GeoKey | None: ...


@dataclass(frozen=True, slots=True)
class FedInFrlGeoFinder:
    """FED on an FRL input: (FRL PC host, FRL slot, input index)."""

    io_column: str = "io"

    def row_key(self, row: FlashlistRow) -> GeoKey:
        return (
            hostname_from_context(row.text("context")),
            row.integer("slotNumber"),
            row.integer(self.io_column),
        )

    def entity_key(self, entity: FED) -> GeoKey | None:
        frl = entity.frl
        if frl is None or frl.frl_pc is None or entity.frl_io is None:
            return None
        return (frl.frl_pc.hostname.lower(), frl.geo_slot, entity.frl_io)


@dataclass(frozen=True, slots=True)
class FedFromFerolInputStreamGeoFinder(FedInFrlGeoFinder):
    io_column: str = "streamNumber"


@dataclass(frozen=True, slots=True)
class FedInFrl40GeoFinder(FedInFrlGeoFinder):
    io_column: str = "streamNumber"


@dataclass(frozen=True, slots=True)
class FedInFmmGeoFinder:
    """FED on an FMM input: (FMM host, FMM slot, input index)."""

    def row_key(self, row: FlashlistRow) -> GeoKey:
        return (row.text("hostname").lower(), row.integer("geoslot"), row.integer("io"))

    def entity_key(self, entity: FED) -> GeoKey | None:
        fmm = entity.fmm
        if fmm is None or fmm.hostname is None or entity.fmm_io is None:
            return None
        return (fmm.hostname.lower(), fmm.geo_slot, entity.fmm_io)


@dataclass(frozen=True, slots=True)
class FRLGeoFinder:
    def row_key(self, row: FlashlistRow) -> GeoKey:
        return (hostname_from_context(row.text("context")), row.integer("slotNumber"))

    def entity_key(self, entity: FRL) -> GeoKey | None:
        if entity.frl_pc is None:
            return None
        return (entity.frl_pc.hostname.lower(), entity.geo_slot)


@dataclass(frozen=True, slots=True)
class FMMGeoFinder:
    def row_key(self, row: FlashlistRow) -> GeoKey:
        return (row.text("hostname").lower(), row.integer("geoslot"))

    def entity_key(self, entity: FMM) -> GeoKey | None:
        if entity.hostname is None:
            return None
        return (entity.hostname.lower(), entity.geo_slot)


@dataclass(frozen=True, slots=True)
class GeoMatcher:
    """One row matches at most one candidate.

    When two candidates compute the same key the first one registered keeps it
    and the collision is logged.
    """

    finder: GeoFinder

    def index[T](self, candidates: Iterable[T]) -> dict[GeoKey, T]:
        by_key: dict[GeoKey, T] = {}
        for candidate in candidates:
            key = self.finder.entity_key(candidate)
            if key is None:
                continue
            if key in by_key:
                log.warning(
                    "Geo key %s computed for two entities; keeping the first registered",
                    key,
                )
                continue
            by_key[key] = candidate
        return by_key

    def match[T](self, rows: Sequence[FlashlistRow], candidates: Iterable[T]) -> MatchResult[T]:
        by_key = self.index(candidates)
        result: MatchResult[T] = MatchResult()
        for row in rows:
            try:
                key = self.finder.row_key(row)
            except MalformedRowError as exc:
                log.warning("Row %d has no usable position: %s", row.index, exc)
                result.unmatched += 1
                continue
            entity = by_key.get(key)
            if entity is None:
                log.debug("No entity at position %s", key)
                result.unmatched += 1
                continue
            result.assign(entity, row)
            result.matched += 1
        return result
