"""Dispatch of flashlist rows onto the entity graph."""

from __future__ import annotations

from .context import DispatchContext, SessionContext
from .dispatcher import FlashlistDispatcher
from .outcome import DispatchOutcome, HandlerOutcome
from .plans import (
    DEFAULT_ORDER,
    DEFAULT_PLANS,
    RU_FED_IDS_KEY,
    SESSION_ID_ORDER,
    DispatchPlan,
    Handler,
    RouteStep,
    RowFilter,
)
from .tcds import apply_tts_channels, build_channel_tree, decode_tts_state

__all__ = [
    "DEFAULT_ORDER",
    "DEFAULT_PLANS",
    "RU_FED_IDS_KEY",
    "SESSION_ID_ORDER",
    "DispatchContext",
    "DispatchOutcome",
    "DispatchPlan",
    "FlashlistDispatcher",
    "Handler",
    "HandlerOutcome",
    "RouteStep",
    "RowFilter",
    "SessionContext",
    "apply_tts_channels",
    "build_channel_tree",
    "decode_tts_state",
]
