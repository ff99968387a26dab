"""
Geocoding client (Google Geocoding API).

Turns a free-text address into coordinates plus the address components the directory
stores (city, state, two-letter state code). Used by submission intake, which refuses
submissions whose address cannot be placed on the map.

Error contract:
- no match (`ZERO_RESULTS`) -> `None`
- the service refusing the request (bad key, quota) -> `GeocodingError`
- transport / non-2xx errors -> `httpx.HTTPError` (propagated, never retried here)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import GeocodingError
from pasturepickup.core.http import get_json

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodeResult:
    """One geocoded location."""

    latitude: float
    longitude: float
    normalized_address: str
    city: str = ""
    state: str = ""
    state_code: str = ""
    country: str = ""


class Geocoder(Protocol):
    def geocode(self, address: str) -> GeocodeResult | None: ...


def _parse_result(result: dict[str, Any], *, latitude: float | None = None, longitude: float | None = None) -> GeocodeResult:
    location = (result.get("geometry") or {}).get("location") or {}
    city = state = state_code = country = ""
    for component in result.get("address_components") or []:
        types = component.get("types") or []
        if "locality" in types:
            city = component.get("long_name", "")
        elif "administrative_area_level_1" in types:
            state = component.get("long_name", "")
            state_code = component.get("short_name", "")
        elif "country" in types:
            country = component.get("long_name", "")

    return GeocodeResult(
        latitude=float(location["lat"]) if latitude is None else latitude,
        longitude=float(location["lng"]) if longitude is None else longitude,
        normalized_address=str(result.get("formatted_address") or ""),
        city=city,
        state=state,
        state_code=state_code,
        country=country,
    )


class GoogleGeocoder:
    """Forward + reverse geocoding against the Google Geocoding REST API."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _require_key(self) -> str:
        key = self._settings.geocoding.api_key
        if not key:
            raise GeocodingError("Missing Google Maps API key. Set GOOGLE_MAPS_API_KEY in env or .env.")
        return key

    def _request(self, params: dict[str, Any]) -> dict[str, Any] | None:
        payload = get_json(
            self._settings.geocoding.base_url,
            params={**params, "key": self._require_key()},
            timeout_seconds=self._settings.app.http_timeout_seconds,
        )
        if not isinstance(payload, dict):
            raise GeocodingError("Unexpected geocoding response shape; expected an object.")

        status = payload.get("status")
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            raise GeocodingError(f"Geocoding failed with status {status}: {payload.get('error_message', '')}".strip())

        results = payload.get("results") or []
        return results[0] if results else None

    def geocode(self, address: str) -> GeocodeResult | None:
        """Geocode `address` (restricted to the configured country)."""
        text = (address or "").strip()
        if not text:
            return None
        logger.info("Geocoding address %r", text)
        result = self._request(
            {"address": text, "components": f"country:{self._settings.geocoding.country}"}
        )
        if result is None:
            logger.info("No geocoding match for %r", text)
            return None
        return _parse_result(result)

    def reverse_geocode(self, lat: float, lng: float) -> GeocodeResult | None:
        """Describe the address at a coordinate (coordinates are kept as given)."""
        result = self._request({"latlng": f"{lat},{lng}"})
        if result is None:
            return None
        return _parse_result(result, latitude=lat, longitude=lng)
