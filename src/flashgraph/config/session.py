"""Session-scoped filter configuration."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars

L0_FILTER_VAR = "FLASHGRAPH_L0_FILTER"
TCDS_SERVICE_VAR = "FLASHGRAPH_TCDS_SERVICE"
TCDS_URL_VAR = "FLASHGRAPH_TCDS_URL"


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Filters applied to session-scoped flashlists.

    ``l0_filter`` is matched as a substring of the level-zero function manager URL;
    the TCDS values select the partition manager service whose rows are kept.
    """

    l0_filter: str
    tcds_service: str | None = None
    tcds_url: str | None = None


def get_session_config() -> SessionConfig:
    values = require_env_vars((L0_FILTER_VAR,))
    return SessionConfig(
        l0_filter=values[L0_FILTER_VAR].strip(),
        tcds_service=optional_env_var(TCDS_SERVICE_VAR),
        tcds_url=optional_env_var(TCDS_URL_VAR),
    )
