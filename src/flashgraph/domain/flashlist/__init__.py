"""Flashlist registry, containers and typed row access."""

from __future__ import annotations

from .context import hostname_from_context, port_from_context
from .flashlist import ColumnDefinition, Flashlist
from .row import ColumnKind, FlashlistRow
from .types import FlashlistType

__all__ = [
    "ColumnDefinition",
    "ColumnKind",
    "Flashlist",
    "FlashlistRow",
    "FlashlistType",
    "hostname_from_context",
    "port_from_context",
]
