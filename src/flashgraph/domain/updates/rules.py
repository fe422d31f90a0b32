"""Field rules describing how one flashlist row maps onto entity attributes.

A plan is an ordered tuple of rules. Rules only *evaluate*: they read the row
(and, for incremental fields, the entity's previous state) and return the
attribute assignments they want. The caller applies all assignments at once
after every rule succeeded, so a malformed row never leaves an entity half
updated.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from flashgraph.domain.flashlist.row import ColumnKind

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from flashgraph.domain.flashlist.row import FlashlistRow

type Assignments = dict[str, object]

JOB_ALIVE_STATUS = "alive"


class FieldRule(Protocol):
    def evaluate(self, entity: Any, row: FlashlistRow) -> Assignments: ...


@dataclass(frozen=True, slots=True)
class Overwrite:
    """Copy one column into one attribute, optionally scaled or inverted."""

    attr: str
    column: str
    kind: ColumnKind = ColumnKind.TEXT
    scale: float | None = None
    invert: bool = False

    def evaluate(self, entity: Any, row: FlashlistRow) -> Assignments:
        if self.scale is not None:
            value: object = row.floating(self.column) * self.scale
        else:
            value = row.read(self.column, self.kind)
        if self.invert:
            value = not value
        return {self.attr: value}


@dataclass(frozen=True, slots=True)
class AccumulatedDelta:
    """Turn a monotonically accumulated source counter into a per-cycle delta.

    The raw accumulated value and the row timestamp are kept on the entity
    (``raw_attr``/``stamp_attr``). A row carrying the stored timestamp is a
    duplicate delivery and changes nothing; the first row ever seen only primes
    the baseline.
    """

    attr: str
    column: str
    raw_attr: str
    stamp_attr: str
    timestamp_column: str = "timestamp"

    def evaluate(self, entity: Any, row: FlashlistRow) -> Assignments:
        stamp = row.timestamp(self.timestamp_column)
        raw = row.floating(self.column)
        previous_stamp: str | None = getattr(entity, self.stamp_attr)
        if stamp == previous_stamp:
            return {}
        delta = 0.0 if previous_stamp is None else raw - getattr(entity, self.raw_attr)
        return {self.attr: delta, self.raw_attr: raw, self.stamp_attr: stamp}


@dataclass(frozen=True, slots=True)
class Derived:
    """Escape hatch for values computed from several columns or from static topology."""

    compute: Callable[[Any, FlashlistRow], Mapping[str, object]]

    def evaluate(self, entity: Any, row: FlashlistRow) -> Assignments:
        return dict(self.compute(entity, row))


type UpdatePlan = tuple[FieldRule, ...]


def evaluate_plan(entity: object, plan: UpdatePlan, row: FlashlistRow) -> Assignments:
    assignments: Assignments = {}
    for rule in plan:
        assignments.update(rule.evaluate(entity, row))
    return assignments


def job_control_crashed(_entity: object, row: FlashlistRow) -> Mapping[str, object]:
    """A process host counts as crashed when any of its jobs is not alive."""

    jobs = row.table("jobTable")
    crashed = any(job.text("status").strip().lower() != JOB_ALIVE_STATUS for job in jobs)
    return {"crashed": crashed}
