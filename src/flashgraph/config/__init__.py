"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging, parse_log_level
from .session import SessionConfig, get_session_config

__all__ = [
    "ConfigurationError",
    "MissingConfigurationError",
    "SessionConfig",
    "configure_logging",
    "get_session_config",
    "optional_env_var",
    "parse_log_level",
    "require_env_vars",
]
