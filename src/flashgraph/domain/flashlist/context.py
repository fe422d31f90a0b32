"""Helpers for the ``context`` column carried by XDAQ application rows.

Contexts look like ``http://host.cms:9500`` or ``host.cms:0:9500``; only the
hostname is used for matching and the trailing number is the application port.
"""

from __future__ import annotations

import re

_SCHEME = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def hostname_from_context(context: str) -> str:
    """Return the bare, lower-cased hostname of ``context``.

    >>> hostname_from_context("http://RU-C2E14-27-01.cms:11100/urn:xdaq-application:lid=50")
    'ru-c2e14-27-01.cms'
    """

    value = _SCHEME.sub("", context.strip())
    value = value.split("/", 1)[0]
    return value.split(":", 1)[0].lower()


def port_from_context(context: str) -> int | None:
    """Return the last numeric ``:``-separated segment of ``context``, if any."""

    value = _SCHEME.sub("", context.strip()).split("/", 1)[0]
    segments = value.split(":")[1:]
    for segment in reversed(segments):
        if segment.isdigit():
            return int(segment)
    return None
