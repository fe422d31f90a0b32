"""Row filters scoping session-wide tables to the monitored session.

Filters may raise ``MalformedRowError``; the dispatcher counts such rows as
unmatched instead of filtered.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from flashgraph.domain.model.daq import DAQ_SUBSYSTEM

if TYPE_CHECKING:
    from flashgraph.domain.flashlist import FlashlistRow
    from flashgraph.domain.model import DAQ

    from .context import SessionContext


def level_zero_url(row: FlashlistRow, _daq: DAQ, session: SessionContext) -> bool:
    return session.l0_filter in row.text("FMURL")


def current_session_id(row: FlashlistRow, daq: DAQ, _session: SessionContext) -> bool:
    if daq.session_id is None:
        return False
    return row.text("SID").strip() == str(daq.session_id)


def daq_subsystem(row: FlashlistRow, daq: DAQ, session: SessionContext) -> bool:
    """Level-zero subsystem row describing the DAQ itself."""

    return row.text("SUBSYS") == DAQ_SUBSYSTEM and level_zero_url(row, daq, session)


def tcds_service(row: FlashlistRow, _daq: DAQ, session: SessionContext) -> bool:
    if session.tcds_service is None:
        return False
    return row.text("service").strip().lower() == session.tcds_service.lower()
