"""Public interface for the topology description adapter."""

from __future__ import annotations

from .builder import build_topology, load_topology
from .schema import TopologyPayload, TopologyPayloadInput

__all__ = [
    "TopologyPayload",
    "TopologyPayloadInput",
    "build_topology",
    "load_topology",
]
