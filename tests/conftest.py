from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from flashgraph.config.session import L0_FILTER_VAR, TCDS_SERVICE_VAR, TCDS_URL_VAR
from flashgraph.domain.dispatch import DispatchContext, FlashlistDispatcher, SessionContext
from flashgraph.domain.reporting import MatchReporter
from tests.support.topology import L0_FILTER, TCDS_SERVICE, TCDS_URL, make_graph

if TYPE_CHECKING:
    from flashgraph.domain.model import TopologyGraph


@pytest.fixture(autouse=True)
def _isolated_session_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (L0_FILTER_VAR, TCDS_SERVICE_VAR, TCDS_URL_VAR):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def graph() -> TopologyGraph:
    return make_graph()


@pytest.fixture
def session() -> SessionContext:
    return SessionContext(l0_filter=L0_FILTER, tcds_service=TCDS_SERVICE, tcds_url=TCDS_URL)


@pytest.fixture
def reporter() -> MatchReporter:
    return MatchReporter()


@pytest.fixture
def dispatcher(
    graph: TopologyGraph, session: SessionContext, reporter: MatchReporter
) -> FlashlistDispatcher:
    return FlashlistDispatcher(graph, DispatchContext(session=session, reporter=reporter))
