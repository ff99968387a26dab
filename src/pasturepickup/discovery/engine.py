"""
Discovery engine.

The single place that turns a query plus an already-fetched vendor collection into
ranked, filtered results. The home map, the point-search page, the state/city/service
pages, the API and the CLI all call through here so filtering is identical everywhere.

Everything in this module is synchronous and side-effect free: fetching vendors and
geocoding happen in the caller before the engine runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from typing import Generic, TypeVar

from pasturepickup.config.settings import Settings
from pasturepickup.core.geo import GeoPoint, haversine_miles
from pasturepickup.discovery.matching import ServiceMatcher, get_service_matcher, loose_service_match
from pasturepickup.domain.models import RankedVendor, RegionMatch, Service, State, Vendor

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_NEARBY_LIMIT = 3


class Pages(Generic[T]):
    """Fixed-size pages over a ranked list.

    Iterating yields every non-empty page once and can be restarted. `page(n)` and
    `cursor()` never raise past the end; they return empty pages instead.
    """

    def __init__(self, items: Sequence[T], page_size: int):
        if int(page_size) <= 0:
            raise ValueError("page_size must be > 0")
        self._items = list(items)
        self._page_size = int(page_size)

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def total_items(self) -> int:
        return len(self._items)

    @property
    def page_count(self) -> int:
        return -(-len(self._items) // self._page_size)

    def page(self, index: int) -> list[T]:
        """Return the zero-based page `index` (empty when out of range)."""
        if index < 0:
            return []
        start = index * self._page_size
        return self._items[start : start + self._page_size]

    def __iter__(self) -> Iterator[list[T]]:
        for index in range(self.page_count):
            yield self.page(index)

    def __len__(self) -> int:
        return self.page_count

    def cursor(self) -> "PageCursor[T]":
        return PageCursor(self)


class PageCursor(Generic[T]):
    """Forward-only reader for incremental "load more" consumption."""

    def __init__(self, pages: Pages[T]):
        self._pages = pages
        self._next_index = 0

    @property
    def pages_consumed(self) -> int:
        return self._next_index

    @property
    def has_more(self) -> bool:
        return self._next_index < self._pages.page_count

    def next(self) -> list[T]:
        page = self._pages.page(self._next_index)
        if page:
            self._next_index += 1
        return page


def paginate(items: Sequence[T], page_size: int) -> Pages[T]:
    return Pages(items, page_size)


def _ranking_key(item: RankedVendor) -> tuple[float, str]:
    return (item.distance_miles if item.distance_miles is not None else float("inf"), item.id)


class DiscoveryEngine:
    """Radius and region discovery over an in-memory vendor collection."""

    def __init__(
        self,
        *,
        service_matcher: ServiceMatcher = loose_service_match,
        nearby_limit: int = DEFAULT_NEARBY_LIMIT,
        default_radius_miles: float = 50,
    ):
        self._matches_service = service_matcher
        self._nearby_limit = max(0, int(nearby_limit))
        self._default_radius_miles = float(default_radius_miles)

    @classmethod
    def from_settings(cls, settings: Settings) -> "DiscoveryEngine":
        discovery = settings.discovery
        return cls(
            service_matcher=get_service_matcher(discovery.service_match),
            nearby_limit=discovery.nearby_limit,
            default_radius_miles=discovery.default_search_radius_miles,
        )

    @property
    def default_radius_miles(self) -> float:
        return self._default_radius_miles

    def matches_service(self, vendor: Vendor, service: Service) -> bool:
        return self._matches_service(vendor, service)

    def find_by_radius(
        self,
        vendors: Iterable[Vendor],
        center: GeoPoint,
        radius_miles: float | None = None,
        *,
        service: Service | None = None,
    ) -> list[RankedVendor]:
        """Return active vendors whose coverage reaches `center`, nearest first.

        A vendor is kept iff its distance is within min(radius, vendor.service_radius).
        Ties on distance are broken by vendor id so pagination stays stable.
        """
        radius = self._default_radius_miles if radius_miles is None else float(radius_miles)
        if radius <= 0:
            return []

        ranked: list[RankedVendor] = []
        for vendor in vendors:
            point = vendor.point
            if not vendor.is_active or point is None:
                continue
            if service is not None and not self.matches_service(vendor, service):
                continue
            d = haversine_miles(center, point)
            if d <= min(radius, vendor.service_radius):
                ranked.append(RankedVendor.from_vendor(vendor, d))

        ranked.sort(key=_ranking_key)
        logger.debug(
            "Radius query lat=%.4f lng=%.4f radius=%.1f service=%s -> %d vendors",
            center.lat,
            center.lng,
            radius,
            service.slug if service else None,
            len(ranked),
        )
        return ranked

    def find_by_region(
        self,
        vendors: Iterable[Vendor],
        state: State,
        city: str | None = None,
        service: Service | None = None,
    ) -> RegionMatch:
        """Split active vendors of `state` into city-local and capped same-state "nearby".

        Region queries use the text fields only; coordinates are not required. `nearby`
        keeps repository order (no distance ranking).
        """
        state_code = state.code.upper()
        city_key = city.strip().lower() if city else None

        local: list[Vendor] = []
        nearby: list[Vendor] = []
        for vendor in vendors:
            if not vendor.is_active or vendor.state_code != state_code:
                continue
            if service is not None and not self.matches_service(vendor, service):
                continue
            if city_key is None or vendor.city.strip().lower() == city_key:
                local.append(vendor)
            else:
                nearby.append(vendor)

        result = RegionMatch(local=local, nearby=nearby[: self._nearby_limit])
        logger.debug(
            "Region query state=%s city=%s service=%s -> local=%d nearby=%d",
            state_code,
            city,
            service.slug if service else None,
            len(result.local),
            len(result.nearby),
        )
        return result

    @staticmethod
    def count_by_city(vendors: Iterable[Vendor], state: State) -> dict[str, int]:
        """Count vendors per major city of `state` (case-insensitive city match)."""
        counts = {city: 0 for city in state.major_cities}
        keys = {city.lower(): city for city in state.major_cities}
        for vendor in vendors:
            city = keys.get(vendor.city.strip().lower())
            if city is not None:
                counts[city] += 1
        return counts

    @staticmethod
    def unranked(vendors: Iterable[Vendor]) -> list[RankedVendor]:
        """Wrap active vendors as ranked items without a distance (repository order)."""
        return [RankedVendor.from_vendor(v) for v in vendors if v.is_active]
