"""
Geospatial helpers.

Distances are in statute miles because every radius in the directory (search radius,
vendor service radius) is expressed in miles.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, isfinite, pi, sin, sqrt

EARTH_RADIUS_MILES = 3959


@dataclass(frozen=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees."""

    lat: float
    lng: float


def _to_rad(degrees: float) -> float:
    return degrees * pi / 180


def distance_miles(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute great-circle (haversine) distance in miles between two coordinates.

    Callers must pass finite numbers; records without coordinates are filtered out
    before they reach this function.
    """
    d_lat = _to_rad(lat2 - lat1)
    d_lng = _to_rad(lng2 - lng1)

    h = sin(d_lat / 2) ** 2 + cos(_to_rad(lat1)) * cos(_to_rad(lat2)) * sin(d_lng / 2) ** 2
    h = min(1.0, h)
    return EARTH_RADIUS_MILES * 2 * atan2(sqrt(h), sqrt(1 - h))


def haversine_miles(a: GeoPoint, b: GeoPoint) -> float:
    """Distance in miles between two `GeoPoint`s."""
    return distance_miles(a.lat, a.lng, b.lat, b.lng)


def is_valid_coordinate(lat: object, lng: object) -> bool:
    """Return True if `lat`/`lng` are finite numbers inside the WGS84 ranges."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if not (isfinite(lat) and isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180
