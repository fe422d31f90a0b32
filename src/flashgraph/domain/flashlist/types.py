"""Known flashlist types and their names at the live access service."""

from __future__ import annotations

from enum import StrEnum

LAS_PREFIX = "urn:xdaq-flashlist:"


class FlashlistType(StrEnum):
    RU = "RU"
    EVM = "EVM"
    BU = "BU"
    JOB_CONTROL = "JOB_CONTROL"
    FEROL_INPUT_STREAM = "FEROL_INPUT_STREAM"
    FEROL_STATUS = "FEROL_STATUS"
    FEROL_CONFIGURATION = "FEROL_CONFIGURATION"
    FRL_MONITORING = "FRL_MONITORING"
    FEROL40_INPUT_STREAM = "FEROL40_INPUT_STREAM"
    FEROL40_STATUS = "FEROL40_STATUS"
    FEROL40_CONFIGURATION = "FEROL40_CONFIGURATION"
    FEROL40_STREAM_CONFIGURATION = "FEROL40_STREAM_CONFIGURATION"
    FMM_INPUT = "FMM_INPUT"
    FMM_STATUS = "FMM_STATUS"
    LEVEL_ZERO_FM_DYNAMIC = "LEVEL_ZERO_FM_DYNAMIC"
    LEVEL_ZERO_FM_SUBSYS = "LEVEL_ZERO_FM_SUBSYS"
    LEVEL_ZERO_FM_STATIC = "LEVEL_ZERO_FM_STATIC"
    TCDS_PM_TTS_CHANNEL = "TCDS_PM_TTS_CHANNEL"
    TCDS_CPM_COUNTS = "TCDS_CPM_COUNTS"
    TCDS_CPM_DEADTIMES = "TCDS_CPM_DEADTIMES"
    TCDS_CPM_RATES = "TCDS_CPM_RATES"
    TCDS_PM_ACTION_COUNTS = "TCDS_PM_ACTION_COUNTS"

    @property
    def flashlist_name(self) -> str:
        """Full name under which the live access service publishes this table."""
        return LAS_PREFIX + _LAS_NAMES[self]

    @classmethod
    def from_name(cls, name: str) -> FlashlistType | None:
        """Resolve an enum value or a LAS name (with or without prefix); ``None`` if unknown."""

        candidate = name.strip()
        if candidate.lower().startswith(LAS_PREFIX):
            candidate = candidate[len(LAS_PREFIX) :]
        if candidate.upper() in cls.__members__:
            return cls[candidate.upper()]
        return _BY_LAS_NAME.get(candidate.lower())


_LAS_NAMES: dict[FlashlistType, str] = {
    FlashlistType.RU: "RU",
    FlashlistType.EVM: "EVM",
    FlashlistType.BU: "BU",
    FlashlistType.JOB_CONTROL: "jobcontrol",
    FlashlistType.FEROL_INPUT_STREAM: "FEROLInputStream",
    FlashlistType.FEROL_STATUS: "FEROLStatus",
    FlashlistType.FEROL_CONFIGURATION: "FEROLConfiguration",
    FlashlistType.FRL_MONITORING: "frlcontrollerLink",
    FlashlistType.FEROL40_INPUT_STREAM: "ferol40InputStream",
    FlashlistType.FEROL40_STATUS: "ferol40Status",
    FlashlistType.FEROL40_CONFIGURATION: "ferol40Configuration",
    FlashlistType.FEROL40_STREAM_CONFIGURATION: "ferol40StreamConfiguration",
    FlashlistType.FMM_INPUT: "FMMInput",
    FlashlistType.FMM_STATUS: "FMMStatus",
    FlashlistType.LEVEL_ZERO_FM_DYNAMIC: "levelZeroFM_dynamic",
    FlashlistType.LEVEL_ZERO_FM_SUBSYS: "levelZeroFM_subsys",
    FlashlistType.LEVEL_ZERO_FM_STATIC: "levelZeroFM_static",
    FlashlistType.TCDS_PM_TTS_CHANNEL: "tcds_pm_tts_channel",
    FlashlistType.TCDS_CPM_COUNTS: "tcds_cpm_counts",
    FlashlistType.TCDS_CPM_DEADTIMES: "tcds_cpm_deadtimes",
    FlashlistType.TCDS_CPM_RATES: "tcds_cpm_rates",
    FlashlistType.TCDS_PM_ACTION_COUNTS: "tcds_pm_action_counts",
}

_BY_LAS_NAME: dict[str, FlashlistType] = {
    las_name.lower(): flashlist_type for flashlist_type, las_name in _LAS_NAMES.items()
}
