"""Mixin giving entities the ``update_from_flashlist`` contract."""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

from .rules import evaluate_plan

if TYPE_CHECKING:
    from collections.abc import Mapping

    from flashgraph.domain.flashlist import FlashlistRow, FlashlistType

    from .rules import UpdatePlan


class FlashlistUpdatable:
    """Entities declare one update plan per flashlist type they understand."""

    UPDATE_PLANS: ClassVar[Mapping[FlashlistType, UpdatePlan]] = {}

    def accepts(self, flashlist_type: FlashlistType) -> bool:
        return flashlist_type in self.UPDATE_PLANS

    def update_from_flashlist(self, flashlist_type: FlashlistType, row: FlashlistRow) -> bool:
        """Apply ``row``; return ``False`` for flashlist types this entity ignores.

        Raises ``MalformedRowError`` before touching any attribute if the row
        cannot satisfy the plan.
        """

        if not self.accepts(flashlist_type):
            return False
        assignments = evaluate_plan(self, self.UPDATE_PLANS[flashlist_type], row)
        for attr, value in assignments.items():
            setattr(self, attr, value)
        return True
