"""Pydantic models describing LAS flashlist JSON payloads."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


class LasBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TableProperties(LasBaseModel):
    name: str = Field(alias="Name")
    last_update: str | None = Field(default=None, alias="LastUpdate")
    last_originator: str | None = Field(default=None, alias="LastOriginator")

    _normalize_optional = field_validator("last_update", "last_originator", mode="before")(
        _blank_to_none
    )


class ColumnDefinitionPayload(LasBaseModel):
    key: str
    type: str = "string"


class FlashlistTable(LasBaseModel):
    properties: TableProperties
    definition: list[ColumnDefinitionPayload] = Field(default_factory=list[ColumnDefinitionPayload])
    rows: list[dict[str, Any]] = Field(default_factory=list[dict[str, Any]])

    @field_validator("rows", mode="before")
    @classmethod
    def _null_rows(cls, value: object) -> object:
        # LAS sends ``null`` for flashlists without any reporting application
        return [] if value is None else value


class FlashlistPayload(LasBaseModel):
    table: FlashlistTable


FlashlistPayloadInput = FlashlistPayload | Mapping[str, object]
