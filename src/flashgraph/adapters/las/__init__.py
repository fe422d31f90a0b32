"""Public interface for the LAS flashlist adapter."""

from __future__ import annotations

from .schema import FlashlistPayload, FlashlistPayloadInput, FlashlistTable
from .translator import load_flashlist, parse_flashlist

__all__ = [
    "FlashlistPayload",
    "FlashlistPayloadInput",
    "FlashlistTable",
    "load_flashlist",
    "parse_flashlist",
]
