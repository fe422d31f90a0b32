"""Per-entity update contract driven by tagged per-field rules."""

from __future__ import annotations

from .rules import (
    AccumulatedDelta,
    Assignments,
    Derived,
    FieldRule,
    Overwrite,
    UpdatePlan,
    evaluate_plan,
    job_control_crashed,
)
from .updatable import FlashlistUpdatable

__all__ = [
    "AccumulatedDelta",
    "Assignments",
    "Derived",
    "FieldRule",
    "FlashlistUpdatable",
    "Overwrite",
    "UpdatePlan",
    "evaluate_plan",
    "job_control_crashed",
]
