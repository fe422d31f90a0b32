from __future__ import annotations

import pytest

from flashgraph.domain.errors import TopologyConfigurationError
from flashgraph.domain.model import (
    DAQ,
    RU,
    EntityType,
    FEDBuilder,
    Pool,
    TopologyGraph,
)
from tests.support.topology import FRL_PC_B, RU_EVM_HOST, RU_HOST, make_graph


def test_graph_indexes_every_entity_once() -> None:
    graph = make_graph()

    ids = [entity.id for entity in graph.entities()]

    assert len(ids) == len(set(ids)) == len(graph)
    assert len(graph.feds()) == 5
    assert len(graph.rus()) == 2
    assert len(graph.bus()) == 2
    assert len(graph.entities(EntityType.FMM)) == 1
    assert graph.daq in graph
    assert graph.entity(graph.daq.id) is graph.daq


def test_pools_are_keyed_by_lower_case_hostname() -> None:
    graph = make_graph()

    rus = graph.pool(Pool.RUS_BY_HOSTNAME)
    frl_pcs = graph.pool(Pool.FRL_PCS_BY_HOSTNAME)

    assert set(rus) == {RU_EVM_HOST, RU_HOST}
    assert FRL_PC_B in frl_pcs
    assert [ru.hostname for ru in graph.pool(Pool.EVMS)] == [RU_EVM_HOST]


def test_feds_are_keyed_by_expected_source_id() -> None:
    graph = make_graph()

    by_expected = graph.pool(Pool.FEDS_BY_EXPECTED_ID)

    assert isinstance(by_expected, dict)
    assert by_expected[1202].fed_id == 202
    assert 202 not in by_expected


def test_unknown_pool_is_a_configuration_error() -> None:
    graph = TopologyGraph(DAQ())
    graph._pools.pop(Pool.FMMS)  # pyright: ignore[reportPrivateUsage] # noqa: SLF001

    assert not graph.has_pool(Pool.FMMS)
    with pytest.raises(TopologyConfigurationError, match="unknown entity pool"):
        graph.pool(Pool.FMMS)


def test_two_evms_fail_validation() -> None:
    daq = DAQ()
    for name in ("a", "b"):
        fed_builder = daq.add_fed_builder(FEDBuilder(name=name))
        fed_builder.attach_ru(RU(hostname=f"ru-{name}.cms", is_evm=True))

    with pytest.raises(TopologyConfigurationError, match="flagged as EVM"):
        TopologyGraph.from_daq(daq)


def test_duplicate_hostnames_fail_validation() -> None:
    daq = DAQ()
    for name in ("a", "b"):
        fed_builder = daq.add_fed_builder(FEDBuilder(name=name))
        fed_builder.attach_ru(RU(hostname="RU-1.cms" if name == "a" else "ru-1.cms"))

    with pytest.raises(TopologyConfigurationError, match="duplicate RU hostname"):
        TopologyGraph.from_daq(daq)


def test_validation_can_be_deferred() -> None:
    daq = DAQ()
    for name in ("a", "b"):
        daq.add_fed_builder(FEDBuilder(name=name)).attach_ru(RU(hostname="ru.cms", is_evm=True))

    graph = TopologyGraph.from_daq(daq, validate=False)

    with pytest.raises(TopologyConfigurationError):
        graph.validate()


def test_reset_absent_keeps_present_entities() -> None:
    graph = make_graph()
    present, absent = graph.rus()
    present.rate = absent.rate = 5.0

    count = graph.reset_absent([present.id])

    assert present.rate == 5.0
    assert absent.rate == 0.0
    assert count == len(graph) - 1


def test_reset_all_clears_every_periodic_field() -> None:
    graph = make_graph()
    for fed in graph.feds():
        fed.percent_busy = 12.0
    graph.daq.level_zero_state = "Running"

    graph.reset_all()

    assert all(fed.percent_busy == 0.0 for fed in graph.feds())
    assert graph.daq.level_zero_state is None
    assert graph.daq.session_id == 4242
