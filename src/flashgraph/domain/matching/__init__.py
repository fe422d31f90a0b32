"""Row-to-entity matching strategies."""

from __future__ import annotations

from .base import Matcher, MatchResult
from .geo import (
    FedFromFerolInputStreamGeoFinder,
    FedInFmmGeoFinder,
    FedInFrl40GeoFinder,
    FedInFrlGeoFinder,
    FMMGeoFinder,
    FRLGeoFinder,
    GeoFinder,
    GeoKey,
    GeoMatcher,
)
from .hostname import HostnameMatcher
from .keyed import BroadcastMatcher, InstanceMatcher, KeyMatcher
from .membership import DEFAULT_ID_COLUMNS, MembershipMatcher

__all__ = [
    "BroadcastMatcher",
    "DEFAULT_ID_COLUMNS",
    "FMMGeoFinder",
    "FRLGeoFinder",
    "FedFromFerolInputStreamGeoFinder",
    "FedInFmmGeoFinder",
    "FedInFrl40GeoFinder",
    "FedInFrlGeoFinder",
    "GeoFinder",
    "GeoKey",
    "GeoMatcher",
    "HostnameMatcher",
    "InstanceMatcher",
    "KeyMatcher",
    "MatchResult",
    "Matcher",
    "MembershipMatcher",
]
