"""Reference-preserving export of the entity graph.

Entities are written nested along the ownership tree, each exactly once with
its ``@id``. Shared and back references are written as ``ref_<name>`` identity
strings, and an entity met a second time is written as ``{"@ref": id}``, so
the output never duplicates or recurses.
"""

from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, cast
from uuid import UUID

from flashgraph.domain.model import Entity
from flashgraph.domain.model.entity import EXPORT, REFERENCE

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flashgraph.domain.model import TopologyGraph

ID_KEY = "@id"
TYPE_KEY = "@type"
REF_KEY = "@ref"
REFERENCE_PREFIX = "ref_"


class _SnapshotWriter:
    def __init__(self) -> None:
        self._written: set[UUID] = set()

    def entity(self, entity: Entity) -> dict[str, Any]:
        if entity.id in self._written:
            return {REF_KEY: str(entity.id)}
        self._written.add(entity.id)
        data: dict[str, Any] = {ID_KEY: str(entity.id), TYPE_KEY: entity.entity_type.value}
        for spec in fields(entity):
            if spec.name == "id" or not spec.metadata.get(EXPORT, True):
                continue
            name = spec.name.lstrip("_")
            value = getattr(entity, spec.name)
            if spec.metadata.get(REFERENCE):
                data[REFERENCE_PREFIX + name] = _reference(value)
            else:
                data[name] = self.value(value)
        return data

    def value(self, value: object) -> Any:
        if isinstance(value, Entity):
            return self.entity(value)
        if isinstance(value, UUID):
            return str(value)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            mapping = cast("Mapping[object, object]", value)
            return {str(key): self.value(item) for key, item in mapping.items()}
        if isinstance(value, list | tuple):
            return [self.value(item) for item in cast("list[object]", value)]
        if is_dataclass(value) and not isinstance(value, type):
            return {spec.name: self.value(getattr(value, spec.name)) for spec in fields(value)}
        return value


def _reference(value: object) -> Any:
    if value is None:
        return None
    if isinstance(value, Entity):
        return str(value.id)
    if isinstance(value, list | tuple):
        return [str(item.id) for item in cast("list[Entity]", value)]
    raise TypeError(f"reference field holds {type(value).__name__}, expected an entity")


def export_snapshot(graph: TopologyGraph) -> dict[str, Any]:
    """Export the whole graph, rooted at the DAQ, as JSON-compatible data."""

    return _SnapshotWriter().entity(graph.daq)


def snapshot_to_json(snapshot: Mapping[str, Any], *, indent: int | None = 2) -> str:
    return json.dumps(snapshot, indent=indent, sort_keys=False)
