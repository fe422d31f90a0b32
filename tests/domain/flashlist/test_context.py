from __future__ import annotations

import pytest

from flashgraph.domain.flashlist import FlashlistType, hostname_from_context, port_from_context


@pytest.mark.parametrize(
    ("context", "expected"),
    [
        ("http://RU-C2E14-27-01.cms:11100/urn:xdaq-application:lid=50", "ru-c2e14-27-01.cms"),
        ("ru-c2e14-27-01.cms:11100", "ru-c2e14-27-01.cms"),
        ("  https://bu-c2d41-10-01.cms  ", "bu-c2d41-10-01.cms"),
        ("frlpc-s1d12-01.cms", "frlpc-s1d12-01.cms"),
    ],
)
def test_hostname_from_context(context: str, expected: str) -> None:
    assert hostname_from_context(context) == expected


def test_port_from_context_uses_last_numeric_segment() -> None:
    assert port_from_context("http://ru-1.cms:11100/urn:xdaq-application:lid=50") == 11100
    assert port_from_context("ru-1.cms:0:9500") == 9500
    assert port_from_context("http://ru-1.cms") is None


def test_flashlist_type_resolves_enum_and_las_names() -> None:
    assert FlashlistType.from_name("RU") is FlashlistType.RU
    assert FlashlistType.from_name("urn:xdaq-flashlist:jobcontrol") is FlashlistType.JOB_CONTROL
    assert FlashlistType.from_name("ferol40InputStream") is FlashlistType.FEROL40_INPUT_STREAM
    assert FlashlistType.from_name("levelZeroFM_subsys") is FlashlistType.LEVEL_ZERO_FM_SUBSYS
    assert FlashlistType.from_name("hltStatistics") is None


def test_flashlist_name_carries_las_prefix() -> None:
    assert FlashlistType.FMM_INPUT.flashlist_name == "urn:xdaq-flashlist:FMMInput"
