"""
Location catalog.

Resolves URL slugs to catalog entities and enumerates every programmatic SEO path.
Reverse lookup (slug -> name) is an exact match against each entry's computed slug;
there is no general "un-slugify".
"""

from __future__ import annotations

from collections.abc import Sequence

from pasturepickup.catalog.regions import LIVESTOCK_SERVICES, US_STATES
from pasturepickup.core.errors import NotFoundError
from pasturepickup.core.text import slugify
from pasturepickup.domain.models import CityMatch, Service, State


class LocationCatalog:
    """Immutable state/city/service catalog with slug resolution."""

    def __init__(
        self,
        states: Sequence[State] = US_STATES,
        services: Sequence[Service] = LIVESTOCK_SERVICES,
    ):
        self._states = tuple(states)
        self._services = tuple(services)
        self._states_by_slug = {s.slug: s for s in self._states}
        self._states_by_code = {s.code.upper(): s for s in self._states}
        self._services_by_slug = {s.slug: s for s in self._services}

    @property
    def states(self) -> tuple[State, ...]:
        return self._states

    @property
    def services(self) -> tuple[Service, ...]:
        return self._services

    def resolve_state(self, slug: str) -> State | None:
        return self._states_by_slug.get(slug)

    def state_by_code(self, code: str) -> State | None:
        return self._states_by_code.get(str(code or "").strip().upper())

    def resolve_city(self, state_slug: str, city_slug: str) -> CityMatch | None:
        """Resolve a city slug within a state; the city must be one of its major cities."""
        state = self.resolve_state(state_slug)
        if state is None:
            return None
        for city in state.major_cities:
            if slugify(city) == city_slug:
                return CityMatch(city=city, state=state)
        return None

    def resolve_service(self, slug: str) -> Service | None:
        return self._services_by_slug.get(slug)

    def is_service_slug(self, slug: str) -> bool:
        return slug in self._services_by_slug

    def require_state(self, slug: str) -> State:
        state = self.resolve_state(slug)
        if state is None:
            raise NotFoundError("state", slug)
        return state

    def require_city(self, state_slug: str, city_slug: str) -> CityMatch:
        match = self.resolve_city(state_slug, city_slug)
        if match is None:
            raise NotFoundError("city", f"{state_slug}/{city_slug}")
        return match

    def require_service(self, slug: str) -> Service:
        service = self.resolve_service(slug)
        if service is None:
            raise NotFoundError("service", slug)
        return service

    def enumerate_all_paths(self) -> list[str]:
        """Return every state, state+service, state+city and state+city+service path."""
        paths: list[str] = []
        for state in self._states:
            state_slug = state.slug
            paths.append(f"/{state_slug}")
            for service in self._services:
                paths.append(f"/{state_slug}/{service.slug}")
            for city in state.major_cities:
                city_slug = slugify(city)
                paths.append(f"/{state_slug}/{city_slug}")
                for service in self._services:
                    paths.append(f"/{state_slug}/{city_slug}/{service.slug}")
        return paths


DEFAULT_CATALOG = LocationCatalog()
