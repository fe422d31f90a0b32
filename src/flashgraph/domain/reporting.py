"""Lifetime match accounting per flashlist type.

The reporter is an explicit object handed to the dispatcher; nothing in the
package keeps one as module state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from threading import Lock

log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatchTotals:
    total: int = 0
    missing: int = 0
    failed: int = 0

    @property
    def matched(self) -> int:
        return self.total - self.missing


@dataclass(slots=True)
class MatchReporter:
    """Thread-safe counters of rows seen, rows left unmatched and failed updates."""

    _totals: dict[str, MatchTotals] = field(default_factory=dict[str, MatchTotals])
    _lock: Lock = field(default_factory=Lock, repr=False)

    def record_outcome(self, key: str, matched: int, unmatched: int) -> None:
        if matched < 0 or unmatched < 0:
            raise ValueError(f"negative match counts for {key}: {matched}/{unmatched}")
        with self._lock:
            current = self._totals.get(key, MatchTotals())
            self._totals[key] = MatchTotals(
                total=current.total + matched + unmatched,
                missing=current.missing + unmatched,
                failed=current.failed,
            )

    def record_failure(self, key: str, count: int = 1) -> None:
        with self._lock:
            current = self._totals.get(key, MatchTotals())
            self._totals[key] = MatchTotals(
                total=current.total,
                missing=current.missing,
                failed=current.failed + count,
            )

    def totals(self, key: str) -> MatchTotals:
        with self._lock:
            return self._totals.get(key, MatchTotals())

    def snapshot(self) -> dict[str, MatchTotals]:
        with self._lock:
            return dict(self._totals)

    def log_summary(self) -> None:
        for key, totals in sorted(self.snapshot().items()):
            if totals.missing or totals.failed:
                log.info(
                    "%s: %d/%d rows matched, %d failed updates",
                    key,
                    totals.matched,
                    totals.total,
                    totals.failed,
                )
            else:
                log.debug("%s: all %d rows matched", key, totals.total)
