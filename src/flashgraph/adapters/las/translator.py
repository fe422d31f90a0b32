"""Translate LAS payloads into domain ``Flashlist`` objects.

A payload that cannot be read yields an *unavailable* flashlist rather than an
exception, which the dispatcher skips like a table LAS failed to deliver.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from flashgraph.domain.flashlist import ColumnDefinition, Flashlist, FlashlistRow, FlashlistType

from .schema import FlashlistPayload, FlashlistPayloadInput

if TYPE_CHECKING:
    from pathlib import Path

log = getLogger(__name__)


def _ensure_payload(payload: FlashlistPayloadInput) -> FlashlistPayload:
    if isinstance(payload, FlashlistPayload):
        return payload
    return FlashlistPayload.model_validate(payload)


def _parse_last_update(value: str | None) -> datetime | None:
    if value is None:
        return None
    normalized = value.strip()
    if normalized.endswith("Z"):
        normalized = normalized[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(normalized)
    except ValueError:
        log.debug("Unparseable LastUpdate %r", value)
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def parse_flashlist(payload: FlashlistPayloadInput) -> Flashlist:
    """Build a ``Flashlist``; raises ``ValidationError`` for malformed payloads."""

    table = _ensure_payload(payload).table
    name = table.properties.name
    flashlist_type = FlashlistType.from_name(name)
    if flashlist_type is None:
        log.debug("Flashlist %s is not recognised", name)
    return Flashlist(
        name=name,
        flashlist_type=flashlist_type,
        rows=tuple(
            FlashlistRow(fields=row, index=position) for position, row in enumerate(table.rows)
        ),
        definition=tuple(ColumnDefinition(key=col.key, type=col.type) for col in table.definition),
        retrieved_at=_parse_last_update(table.properties.last_update),
    )


def load_flashlist(path: Path) -> Flashlist:
    """Read one LAS JSON file; unreadable files become unavailable flashlists."""

    try:
        with path.open(encoding="utf-8") as handle:
            return parse_flashlist(json.load(handle))
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        log.warning("Cannot read flashlist from %s: %s", path, exc)
        return Flashlist.unavailable(path.stem, FlashlistType.from_name(path.stem))
