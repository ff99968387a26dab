"""
Map geometry for the vendor map.

Rendering and clustering happen in the browser; this module only decides *what* to
show: the bounding box of the plotted vendors, how the viewport should fit it, and the
GeoJSON points fed to the clustered national view.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any, Literal

from pasturepickup.core.geo import GeoPoint
from pasturepickup.domain.models import Vendor

ViewMode = Literal["us", "local"]

MOBILE_BREAKPOINT_PX = 768


@dataclass(frozen=True)
class MapBounds:
    """South-west / north-east corners in decimal degrees."""

    south: float
    west: float
    north: float
    east: float

    def extend(self, point: GeoPoint) -> "MapBounds":
        return MapBounds(
            south=min(self.south, point.lat),
            west=min(self.west, point.lng),
            north=max(self.north, point.lat),
            east=max(self.east, point.lng),
        )

    def as_lng_lat_pairs(self) -> list[list[float]]:
        return [[self.west, self.south], [self.east, self.north]]


@dataclass(frozen=True)
class MapFit:
    """How the client should position the map.

    Exactly one of `bounds` (fit-to-bounds) or `center` (fly-to) is set.
    """

    bounds: MapBounds | None = None
    padding: int = 0
    max_zoom: float | None = None
    center: GeoPoint | None = None
    zoom: float | None = None

    def as_dict(self) -> dict[str, Any]:
        if self.center is not None:
            return {"mode": "center", "center": [self.center.lng, self.center.lat], "zoom": self.zoom}
        if self.bounds is None:
            return {"mode": "none"}
        return {
            "mode": "bounds",
            "bounds": self.bounds.as_lng_lat_pairs(),
            "padding": self.padding,
            "max_zoom": self.max_zoom,
        }


def plottable(vendors: Iterable[Vendor]) -> list[Vendor]:
    return [v for v in vendors if v.point is not None]


def bounds_for(vendors: Iterable[Vendor]) -> MapBounds | None:
    """Bounding box of all vendors with coordinates (None when there are none)."""
    bounds: MapBounds | None = None
    for vendor in plottable(vendors):
        point = vendor.point
        if bounds is None:
            bounds = MapBounds(south=point.lat, west=point.lng, north=point.lat, east=point.lng)
        else:
            bounds = bounds.extend(point)
    return bounds


def fit_view(
    vendors: Iterable[Vendor],
    *,
    mode: ViewMode = "local",
    center: GeoPoint | None = None,
    viewport_width_px: int | None = None,
) -> MapFit:
    """Decide the viewport for a set of vendors."""
    points = plottable(vendors)
    if not points:
        return MapFit()

    if mode == "us":
        return MapFit(bounds=bounds_for(points), padding=200, max_zoom=4)

    # A searched location wins over the vendor bounds.
    if center is not None:
        return MapFit(center=center, zoom=6)

    narrow = viewport_width_px is not None and viewport_width_px < MOBILE_BREAKPOINT_PX
    return MapFit(
        bounds=bounds_for(points),
        padding=30 if narrow else 50,
        max_zoom=9 if len(points) == 1 else 7,
    )


def vendor_feature_collection(vendors: Iterable[Vendor]) -> dict[str, Any]:
    """GeoJSON FeatureCollection of vendor points (`[lng, lat]` order) for clustering."""
    features = [
        {
            "type": "Feature",
            "geometry": {"type": "Point", "coordinates": [v.longitude, v.latitude]},
            "properties": {
                "id": v.id,
                "name": v.name,
                "city": v.city,
                "state": v.state_code,
                "emergency_service": v.emergency_service,
            },
        }
        for v in plottable(vendors)
    ]
    return {"type": "FeatureCollection", "features": features}
