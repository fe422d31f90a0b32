"""Route each flashlist's rows to the entities they describe."""

from __future__ import annotations

from collections.abc import Mapping
from logging import getLogger
from typing import TYPE_CHECKING, Any

from flashgraph.domain.errors import MalformedRowError, TopologyConfigurationError

from .outcome import DispatchOutcome
from .plans import DEFAULT_ORDER, DEFAULT_PLANS

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from flashgraph.domain.flashlist import Flashlist, FlashlistRow, FlashlistType
    from flashgraph.domain.model import Entity, PoolContents, TopologyGraph

    from .context import DispatchContext
    from .plans import DispatchPlan, RowFilter

log = getLogger(__name__)


class FlashlistDispatcher:
    """Apply flashlists to a graph following per-type dispatch plans.

    Construction fails with ``TopologyConfigurationError`` when a plan names a
    pool the graph does not provide. After that nothing raised by a row escapes
    ``dispatch``: unmatched, filtered and malformed rows are logged and counted.
    """

    def __init__(
        self,
        graph: TopologyGraph,
        context: DispatchContext,
        plans: Mapping[FlashlistType, DispatchPlan] = DEFAULT_PLANS,
    ) -> None:
        missing = sorted(
            {
                step.pool.value
                for plan in plans.values()
                for step in plan.steps
                if not graph.has_pool(step.pool)
            }
        )
        if missing:
            raise TopologyConfigurationError(f"dispatch plans need missing pools: {missing}")
        self._graph = graph
        self._context = context
        self._plans = plans

    @property
    def context(self) -> DispatchContext:
        return self._context

    def plan_for(self, flashlist_type: FlashlistType | None) -> DispatchPlan | None:
        if flashlist_type is None:
            return None
        return self._plans.get(flashlist_type)

    def ordered(self, flashlists: Iterable[Flashlist]) -> list[Flashlist]:
        """Stable sort putting tables that other filters depend on first."""

        def order(flashlist: Flashlist) -> int:
            plan = self.plan_for(flashlist.flashlist_type)
            return DEFAULT_ORDER if plan is None else plan.order

        return sorted(flashlists, key=order)

    def dispatch(self, flashlist: Flashlist) -> DispatchOutcome:
        outcome = DispatchOutcome(
            name=flashlist.name,
            flashlist_type=flashlist.flashlist_type,
            rows=len(flashlist.rows),
        )
        plan = self.plan_for(flashlist.flashlist_type)
        skipped = self._skip_reason(flashlist, plan)
        if plan is not None and skipped in (None, "empty"):
            self._clear_presence_fields(plan)
        if skipped is not None or plan is None or flashlist.flashlist_type is None:
            outcome.skipped = skipped or "unrecognised"
            return outcome
        flashlist_type = flashlist.flashlist_type
        reporter = self._context.reporter
        key = flashlist_type.value

        rows, malformed = self._filter_rows(plan.row_filter, flashlist.rows)
        outcome.filtered = len(flashlist.rows) - len(rows) - malformed

        matched_rows: set[int] = set()
        for step in plan.steps:
            step_rows = rows
            if step.row_filter is not None:
                step_rows, _ = self._filter_rows(step.row_filter, rows)
            result = step.matcher.match(step_rows, self._graph.pool(step.pool))
            self._apply(flashlist_type, result.assignments, outcome, step.report_as or key)
            if step.report_as is not None:
                reporter.record_outcome(step.report_as, result.matched, result.unmatched)
            else:
                matched_rows |= result.matched_rows

        if plan.handler is not None:
            handled = plan.handler(rows, self._graph, self._context.session)
            matched_rows |= handled.matched_rows
            outcome.updated += handled.updated
            if handled.failed:
                outcome.failed += handled.failed
                reporter.record_failure(key, handled.failed)

        outcome.matched = len(matched_rows)
        outcome.unmatched = len(rows) + malformed - outcome.matched
        reporter.record_outcome(key, outcome.matched, outcome.unmatched)
        log.debug(
            "%s: %d rows, %d filtered, %d matched, %d unmatched, %d updated, %d failed",
            key,
            outcome.rows,
            outcome.filtered,
            outcome.matched,
            outcome.unmatched,
            outcome.updated,
            outcome.failed,
        )
        return outcome

    def _skip_reason(self, flashlist: Flashlist, plan: DispatchPlan | None) -> str | None:
        if plan is None:
            log.debug("Ignoring unrecognised flashlist %s", flashlist.name)
            return "unrecognised"
        if flashlist.unknown_at_source:
            log.debug("Ignoring %s: it was not retrieved from its source", flashlist.name)
            return "not retrieved"
        if plan.requires_tcds and not self._context.session.has_tcds:
            log.debug("Ignoring %s: no TCDS service configured", flashlist.name)
            return "no TCDS service"
        if plan.expect_single_row and len(flashlist.rows) != 1:
            log.error(
                "Expected exactly one row in %s, got %d; not dispatching",
                flashlist.name,
                len(flashlist.rows),
            )
            return "anomalous shape"
        if flashlist.is_empty:
            log.debug("Ignoring %s: no rows", flashlist.name)
            return "empty"
        if not plan.routed:
            return "not routed"
        return None

    def _clear_presence_fields(self, plan: DispatchPlan) -> None:
        """Reset fields set only by presence in a row, including when the table came back empty."""

        for step in plan.steps:
            if step.clear:
                for entity in _pool_entities(self._graph.pool(step.pool)):
                    entity.reset_fields(*step.clear)

    def _filter_rows(
        self, row_filter: RowFilter | None, rows: Sequence[FlashlistRow]
    ) -> tuple[list[FlashlistRow], int]:
        """Return rows passing ``row_filter`` and the number of rows it could not read."""

        if row_filter is None:
            return list(rows), 0
        kept: list[FlashlistRow] = []
        malformed = 0
        for row in rows:
            try:
                if row_filter(row, self._graph.daq, self._context.session):
                    kept.append(row)
            except MalformedRowError as exc:
                log.warning("Row %d cannot be filtered: %s", row.index, exc)
                malformed += 1
        return kept, malformed

    def _apply(
        self,
        flashlist_type: FlashlistType,
        assignments: Mapping[Any, FlashlistRow],
        outcome: DispatchOutcome,
        key: str,
    ) -> None:
        for entity, row in assignments.items():
            try:
                changed = entity.update_from_flashlist(flashlist_type, row)
            except MalformedRowError as exc:
                log.warning(
                    "%s row %d not applied to %s: %s",
                    key,
                    row.index,
                    type(entity).__name__,
                    exc,
                )
                outcome.failed += 1
                self._context.reporter.record_failure(key)
                continue
            if changed:
                outcome.updated += 1


def _pool_entities(pool: PoolContents) -> Iterable[Entity]:
    if isinstance(pool, Mapping):
        return pool.values()
    return pool
