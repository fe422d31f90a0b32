from __future__ import annotations

import pytest

from flashgraph.domain.flashlist import FlashlistType
from flashgraph.domain.model import (
    BU,
    FED,
    FMM,
    FRL,
    RU,
    EntityType,
    FEDBuilder,
    FMMApplication,
    FRLPc,
    SubFEDBuilder,
)
from tests.support.topology import row


def test_entities_get_distinct_identities_and_compare_by_identity() -> None:
    first = FED(fed_id=1, src_id_expected=1)
    second = FED(fed_id=1, src_id_expected=1)

    assert first.id != second.id
    assert first != second
    assert first.entity_type is EntityType.FED


def test_reset_restores_periodic_defaults_and_keeps_topology() -> None:
    ru = RU(hostname="ru-1.cms", port=11100, instance=3)
    ru.rate = 10.0
    ru.state_name = "Enabled"
    ru.bu_tids = [1, 2]
    original_id = ru.id

    ru.reset()

    assert ru.rate == 0.0
    assert ru.state_name is None
    assert ru.bu_tids == []
    assert ru.hostname == "ru-1.cms"
    assert ru.instance == 3
    assert ru.id == original_id


def test_reset_gives_every_entity_fresh_lists() -> None:
    first = RU(hostname="ru-1.cms")
    second = RU(hostname="ru-2.cms")
    first.reset()
    second.reset()

    first.throughput_per_bu.append(1.0)

    assert second.throughput_per_bu == []


def test_reset_fields_rejects_static_fields() -> None:
    fed = FED(fed_id=7, src_id_expected=7)

    with pytest.raises(ValueError, match="not a periodic field"):
        fed.reset_fields("fed_id")


def test_frl_add_fed_sets_back_reference_and_input() -> None:
    frl = FRL(geo_slot=3)
    fed = frl.add_fed(FED(fed_id=101, src_id_expected=101), io=1)

    assert fed.frl is frl
    assert fed.frl_io == 1
    assert frl.feds == {1: fed}


def test_frl_rejects_two_feds_on_one_input() -> None:
    frl = FRL(geo_slot=3)
    frl.add_fed(FED(fed_id=101, src_id_expected=101), io=0)

    with pytest.raises(ValueError, match="already has a FED on input 0"):
        frl.add_fed(FED(fed_id=102, src_id_expected=102), io=0)


def test_sub_fed_builder_lends_its_pc_to_frls_without_one() -> None:
    pc = FRLPc(hostname="frlpc-1.cms")
    other_pc = FRLPc(hostname="frlpc-2.cms")
    sub_fed_builder = SubFEDBuilder(name="line", frl_pc=pc)

    inherited = sub_fed_builder.add_frl(FRL(geo_slot=1))
    explicit = sub_fed_builder.add_frl(FRL(geo_slot=2, frl_pc=other_pc))

    assert inherited.frl_pc is pc
    assert explicit.frl_pc is other_pc
    assert inherited.sub_fed_builder is sub_fed_builder


def test_fed_builder_walks_its_feds_and_ru() -> None:
    fed_builder = FEDBuilder(name="FB")
    sub_fed_builder = fed_builder.add_sub_fed_builder(SubFEDBuilder(name="line"))
    frl = sub_fed_builder.add_frl(FRL(geo_slot=1))
    feds = [frl.add_fed(FED(fed_id=n, src_id_expected=n), io=n) for n in (0, 1)]
    ru = fed_builder.attach_ru(RU(hostname="ru-1.cms"))

    assert list(ru.iter_feds()) == feds
    assert ru.fed_builder is fed_builder
    assert sub_fed_builder.fed_builder is fed_builder


def test_evm_ignores_readout_unit_rows() -> None:
    evm = RU(hostname="ru-1.cms", is_evm=True)
    ru = RU(hostname="ru-2.cms")

    assert not evm.accepts(FlashlistType.RU)
    assert evm.accepts(FlashlistType.EVM)
    assert ru.accepts(FlashlistType.RU)


def test_update_from_unknown_type_is_a_no_op() -> None:
    bu = BU(hostname="bu-1.cms")

    assert bu.update_from_flashlist(FlashlistType.FMM_INPUT, row(fractionBusy=1.0)) is False
    assert bu.rate == 0.0


def test_fmm_output_selects_a_or_b() -> None:
    application = FMMApplication(hostname="fmmpc.cms")
    fmm = application.add_fmm(FMM(geo_slot=5))
    fmm.output_state_a, fmm.percent_busy_a, fmm.percent_warning_a = "READY", 0.0, 1.0
    fmm.output_state_b, fmm.percent_busy_b, fmm.percent_warning_b = "BUSY", 50.0, 0.0

    assert fmm.hostname == "fmmpc.cms"
    assert fmm.output(0) == ("READY", 0.0, 1.0)
    assert fmm.output(1) == ("BUSY", 50.0, 0.0)
