"""Logging setup shared by the CLI and tests."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


def parse_log_level(name: str) -> int:
    """Translate a level name such as ``debug`` into its ``logging`` constant."""

    level = logging.getLevelNamesMapping().get(name.strip().upper())
    if level is None:
        raise ValueError(f"Unknown log level: {name}")
    return level


def configure_logging(*, level: int = logging.INFO, force: bool = False) -> None:
    """Initialise the root logger once.

    Per-row misses log at DEBUG, so INFO keeps one line per cycle plus anomalies.
    Pass ``force=True`` to reconfigure an already configured root logger.
    """

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, force=force)
