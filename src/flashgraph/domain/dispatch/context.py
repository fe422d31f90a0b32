"""Explicit per-session context threaded through dispatch."""

from __future__ import annotations

from dataclasses import dataclass, field

from flashgraph.domain.reporting import MatchReporter


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Filters identifying the monitored session.

    ``l0_filter`` is matched as a substring of the level-zero function manager
    URL; the TCDS values name the partition manager service whose rows apply.
    """

    l0_filter: str
    tcds_service: str | None = None
    tcds_url: str | None = None

    @property
    def has_tcds(self) -> bool:
        return self.tcds_service is not None and self.tcds_url is not None


@dataclass(frozen=True, slots=True)
class DispatchContext:
    session: SessionContext
    reporter: MatchReporter = field(default_factory=MatchReporter)
