"""Pydantic models describing a topology description file."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _lower(value: object) -> object:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class TopologyBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


class FMMRef(TopologyBaseModel):
    hostname: str
    geo_slot: int = Field(alias="geoslot")

    _normalize_hostname = field_validator("hostname", mode="before")(_lower)


class FEDPayload(TopologyBaseModel):
    fed_id: int = Field(alias="id")
    src_id_expected: int | None = Field(default=None, alias="srcIdExpected")
    io: int | None = None
    fmm: FMMRef | None = None
    fmm_io: int | None = Field(default=None, alias="fmmIO")
    has_slink: bool = Field(default=True, alias="hasSLINK")
    has_tts: bool = Field(default=True, alias="hasTTS")
    main_feds: list[int] = Field(default_factory=list[int], alias="mainFeds")

    @property
    def expected_source_id(self) -> int:
        return self.fed_id if self.src_id_expected is None else self.src_id_expected


class FRLPayload(TopologyBaseModel):
    geo_slot: int = Field(alias="geoslot")
    type: str = "FEROL"
    frl_pc: str | None = Field(default=None, alias="frlPc")
    feds: list[FEDPayload] = Field(default_factory=list[FEDPayload])

    _normalize_hostname = field_validator("frl_pc", mode="before")(_lower)

    @field_validator("feds")
    @classmethod
    def _inputs_given(cls, feds: list[FEDPayload]) -> list[FEDPayload]:
        for fed in feds:
            if fed.io is None:
                raise ValueError(f"FED {fed.fed_id} on an FRL needs an io index")
        return feds


class SubFEDBuilderPayload(TopologyBaseModel):
    name: str
    ttc_partition: str | None = Field(default=None, alias="ttcPartition")
    frl_pc: str | None = Field(default=None, alias="frlPc")
    frls: list[FRLPayload] = Field(default_factory=list[FRLPayload])

    _normalize_hostname = field_validator("frl_pc", mode="before")(_lower)


class ApplicationPayload(TopologyBaseModel):
    hostname: str
    port: int = 0
    instance: int | None = None

    _normalize_hostname = field_validator("hostname", mode="before")(_lower)


class RUPayload(ApplicationPayload):
    is_evm: bool = Field(default=False, alias="isEVM")


class FEDBuilderPayload(TopologyBaseModel):
    name: str
    ru: RUPayload | None = None
    sub_fed_builders: list[SubFEDBuilderPayload] = Field(
        default_factory=list[SubFEDBuilderPayload], alias="subFedBuilders"
    )


class FMMPayload(TopologyBaseModel):
    geo_slot: int = Field(alias="geoslot")
    url: str | None = None
    dual: bool = False


class FMMApplicationPayload(ApplicationPayload):
    fmms: list[FMMPayload] = Field(default_factory=list[FMMPayload])


class TCDSInfoPayload(TopologyBaseModel):
    pm_nr: int | None = Field(default=None, alias="pmNr")
    ici_nr: int | None = Field(default=None, alias="iciNr")
    null_cause: str | None = Field(default=None, alias="nullCause")


class TTCPartitionPayload(TopologyBaseModel):
    name: str
    ttc_id: int = Field(alias="id")
    fmm: FMMRef | None = None
    fmm_io: int = Field(default=0, alias="fmmIO")
    tcds: TCDSInfoPayload = Field(default_factory=TCDSInfoPayload)


class TopologyPayload(TopologyBaseModel):
    session_id: int | None = Field(default=None, alias="sessionId")
    run_number: int | None = Field(default=None, alias="runNumber")
    subsystems: list[str] = Field(default_factory=list[str])
    frl_pcs: list[ApplicationPayload] = Field(
        default_factory=list[ApplicationPayload], alias="frlPcs"
    )
    fmm_applications: list[FMMApplicationPayload] = Field(
        default_factory=list[FMMApplicationPayload], alias="fmmApplications"
    )
    ttc_partitions: list[TTCPartitionPayload] = Field(
        default_factory=list[TTCPartitionPayload], alias="ttcPartitions"
    )
    fed_builders: list[FEDBuilderPayload] = Field(
        default_factory=list[FEDBuilderPayload], alias="fedBuilders"
    )
    feds_without_frl: list[FEDPayload] = Field(
        default_factory=list[FEDPayload], alias="fedsWithoutFrl"
    )
    bus: list[ApplicationPayload] = Field(default_factory=list[ApplicationPayload])


TopologyPayloadInput = TopologyPayload | Mapping[str, object]
