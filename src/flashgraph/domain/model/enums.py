"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class EntityType(StrEnum):
    """Discriminator for every node of the topology graph."""

    DAQ = "daq"
    FED_BUILDER = "fed_builder"
    SUB_FED_BUILDER = "sub_fed_builder"
    FRL = "frl"
    FRL_PC = "frl_pc"
    FED = "fed"
    RU = "ru"
    BU = "bu"
    TTC_PARTITION = "ttc_partition"
    FMM = "fmm"
    FMM_APPLICATION = "fmm_application"
    SUBSYSTEM = "subsystem"
    FED_BUILDER_SUMMARY = "fed_builder_summary"
    BU_SUMMARY = "bu_summary"
    TCDS_GLOBAL_INFO = "tcds_global_info"
