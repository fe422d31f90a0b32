"""Build the session's entity graph from a topology description.

References between sections (FRL PCs by hostname, FMMs by position, TTC
partitions by name, main FEDs by id) are resolved here; any reference that
does not resolve makes the topology unusable.
"""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from flashgraph.domain.errors import TopologyConfigurationError
from flashgraph.domain.model import (
    BU,
    DAQ,
    FED,
    FMM,
    FRL,
    RU,
    FEDBuilder,
    FMMApplication,
    FRLPc,
    SubFEDBuilder,
    SubSystem,
    TCDSPartitionInfo,
    TopologyGraph,
    TTCPartition,
)

from .schema import TopologyPayload, TopologyPayloadInput

if TYPE_CHECKING:
    from pathlib import Path

    from .schema import FEDBuilderPayload, FEDPayload, FMMRef, TTCPartitionPayload

log = getLogger(__name__)


def _ensure_payload(payload: TopologyPayloadInput) -> TopologyPayload:
    if isinstance(payload, TopologyPayload):
        return payload
    try:
        return TopologyPayload.model_validate(payload)
    except ValidationError as exc:
        raise TopologyConfigurationError(f"invalid topology description: {exc}") from exc


class _TopologyBuilder:
    def __init__(self, payload: TopologyPayload) -> None:
        self._payload = payload
        self._daq = DAQ(session_id=payload.session_id, run_number=payload.run_number)
        self._frl_pcs: dict[str, FRLPc] = {}
        self._fmms: dict[tuple[str, int], FMM] = {}
        self._partitions: dict[str, TTCPartition] = {}
        self._feds_by_id: dict[int, FED] = {}
        self._main_fed_ids: list[tuple[FED, list[int]]] = []

    def build(self) -> DAQ:
        payload = self._payload
        for name in payload.subsystems:
            self._daq.add_subsystem(SubSystem(name=name))
        for pc in payload.frl_pcs:
            self._frl_pcs[pc.hostname] = self._daq.add_frl_pc(
                FRLPc(hostname=pc.hostname, port=pc.port)
            )
        for app_payload in payload.fmm_applications:
            application = self._daq.add_fmm_application(
                FMMApplication(hostname=app_payload.hostname, port=app_payload.port)
            )
            for fmm_payload in app_payload.fmms:
                fmm = application.add_fmm(
                    FMM(geo_slot=fmm_payload.geo_slot, url=fmm_payload.url, dual=fmm_payload.dual)
                )
                self._fmms[(application.hostname, fmm.geo_slot)] = fmm
        for partition_payload in payload.ttc_partitions:
            self._daq.add_ttc_partition(self._ttc_partition(partition_payload))
        for fed_builder_payload in payload.fed_builders:
            self._daq.add_fed_builder(self._fed_builder(fed_builder_payload))
        for fed_payload in payload.feds_without_frl:
            self._daq.add_fed_without_frl(self._fed(fed_payload))
        for bu_payload in payload.bus:
            self._daq.add_bu(
                BU(hostname=bu_payload.hostname, port=bu_payload.port, instance=bu_payload.instance)
            )
        self._link_main_feds()
        return self._daq

    def _ttc_partition(self, payload: TTCPartitionPayload) -> TTCPartition:
        if payload.name in self._partitions:
            raise TopologyConfigurationError(f"TTC partition {payload.name} declared twice")
        partition = TTCPartition(
            name=payload.name,
            ttc_id=payload.ttc_id,
            fmm=self._fmm(payload.fmm),
            fmm_io=payload.fmm_io,
            tcds_info=TCDSPartitionInfo(
                pm_nr=payload.tcds.pm_nr,
                ici_nr=payload.tcds.ici_nr,
                null_cause=payload.tcds.null_cause,
            ),
        )
        self._partitions[partition.name] = partition
        return partition

    def _fed_builder(self, payload: FEDBuilderPayload) -> FEDBuilder:
        fed_builder = FEDBuilder(name=payload.name)
        for sub_payload in payload.sub_fed_builders:
            sub_fed_builder = fed_builder.add_sub_fed_builder(
                SubFEDBuilder(
                    name=sub_payload.name,
                    ttc_partition=self._partition(sub_payload.ttc_partition),
                    frl_pc=self._frl_pc(sub_payload.frl_pc),
                )
            )
            for frl_payload in sub_payload.frls:
                frl = sub_fed_builder.add_frl(
                    FRL(
                        geo_slot=frl_payload.geo_slot,
                        type=frl_payload.type,
                        frl_pc=self._frl_pc(frl_payload.frl_pc),
                    )
                )
                for fed_payload in frl_payload.feds:
                    if fed_payload.io is None:
                        raise TopologyConfigurationError(f"FED {fed_payload.fed_id} has no input")
                    try:
                        frl.add_fed(self._fed(fed_payload), io=fed_payload.io)
                    except ValueError as exc:
                        raise TopologyConfigurationError(str(exc)) from exc
        if payload.ru is not None:
            fed_builder.attach_ru(
                RU(
                    hostname=payload.ru.hostname,
                    port=payload.ru.port,
                    instance=payload.ru.instance,
                    is_evm=payload.ru.is_evm,
                )
            )
        return fed_builder

    def _fed(self, payload: FEDPayload) -> FED:
        if payload.fed_id in self._feds_by_id:
            raise TopologyConfigurationError(f"FED {payload.fed_id} declared twice")
        fed = FED(
            fed_id=payload.fed_id,
            src_id_expected=payload.expected_source_id,
            fmm=self._fmm(payload.fmm),
            fmm_io=payload.fmm_io,
            has_slink=payload.has_slink,
            has_tts=payload.has_tts,
        )
        if fed.fmm is not None:
            fed.fmm.feds.append(fed)
        if payload.main_feds:
            self._main_fed_ids.append((fed, payload.main_feds))
        self._feds_by_id[fed.fed_id] = fed
        return fed

    def _link_main_feds(self) -> None:
        for fed, main_ids in self._main_fed_ids:
            for main_id in main_ids:
                main = self._feds_by_id.get(main_id)
                if main is None:
                    raise TopologyConfigurationError(
                        f"FED {fed.fed_id} names unknown main FED {main_id}"
                    )
                fed.main_feds.append(main)

    def _frl_pc(self, hostname: str | None) -> FRLPc | None:
        if hostname is None:
            return None
        try:
            return self._frl_pcs[hostname]
        except KeyError:
            raise TopologyConfigurationError(f"unknown FRL PC {hostname}") from None

    def _fmm(self, ref: FMMRef | None) -> FMM | None:
        if ref is None:
            return None
        try:
            return self._fmms[(ref.hostname, ref.geo_slot)]
        except KeyError:
            raise TopologyConfigurationError(
                f"unknown FMM {ref.hostname} slot {ref.geo_slot}"
            ) from None

    def _partition(self, name: str | None) -> TTCPartition | None:
        if name is None:
            return None
        try:
            return self._partitions[name]
        except KeyError:
            raise TopologyConfigurationError(f"unknown TTC partition {name}") from None


def build_topology(payload: TopologyPayloadInput) -> TopologyGraph:
    """Construct and validate the graph; raises ``TopologyConfigurationError``."""

    daq = _TopologyBuilder(_ensure_payload(payload)).build()
    graph = TopologyGraph.from_daq(daq)
    log.info(
        "Topology built: %d entities, %d FED builders, %d FEDs",
        len(graph),
        len(daq.fed_builders),
        len(graph.feds()),
    )
    return graph


def load_topology(path: Path) -> TopologyGraph:
    try:
        with path.open(encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise TopologyConfigurationError(f"cannot read topology from {path}: {exc}") from exc
    return build_topology(payload)
