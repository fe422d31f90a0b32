"""Domain error taxonomy.

Row-level problems (``MalformedRowError``) are always recovered by the dispatcher;
``TopologyConfigurationError`` is the only error allowed to abort a session.
"""

from __future__ import annotations


class FlashgraphError(Exception):
    """Base class for domain errors."""


class MalformedRowError(FlashgraphError):
    """A flashlist row lacks a column or carries a value of the wrong kind."""

    def __init__(self, column: str, reason: str) -> None:
        super().__init__(f"column {column!r}: {reason}")
        self.column = column
        self.reason = reason


class TopologyConfigurationError(FlashgraphError):
    """The entity graph or its dispatch pools are structurally invalid."""
