import pytest

import pasturepickup.ingestion.geocoding as geocoding
from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import GeocodingError
from pasturepickup.ingestion.geocoding import GoogleGeocoder

AUSTIN_RESULT = {
    "formatted_address": "Austin, TX, USA",
    "geometry": {"location": {"lat": 30.2672, "lng": -97.7431}},
    "address_components": [
        {"long_name": "Austin", "short_name": "Austin", "types": ["locality", "political"]},
        {"long_name": "Travis County", "short_name": "Travis County", "types": ["administrative_area_level_2"]},
        {"long_name": "Texas", "short_name": "TX", "types": ["administrative_area_level_1", "political"]},
        {"long_name": "United States", "short_name": "US", "types": ["country", "political"]},
    ],
}


def _settings(api_key="gkey") -> Settings:
    return Settings.model_validate({"geocoding": {"api_key": api_key}})


def test_geocode_parses_first_result(monkeypatch):
    seen = {}

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        seen["url"] = url
        seen["params"] = params
        return {"status": "OK", "results": [AUSTIN_RESULT]}

    monkeypatch.setattr(geocoding, "get_json", fake_get_json)
    result = GoogleGeocoder(_settings()).geocode(" Austin, TX ")

    assert seen["url"] == "https://maps.googleapis.com/maps/api/geocode/json"
    assert seen["params"] == {"address": "Austin, TX", "components": "country:US", "key": "gkey"}
    assert result.latitude == pytest.approx(30.2672)
    assert result.longitude == pytest.approx(-97.7431)
    assert result.city == "Austin"
    assert result.state == "Texas"
    assert result.state_code == "TX"
    assert result.country == "United States"
    assert result.normalized_address == "Austin, TX, USA"


def test_zero_results_is_none(monkeypatch):
    monkeypatch.setattr(geocoding, "get_json", lambda *a, **k: {"status": "ZERO_RESULTS", "results": []})
    assert GoogleGeocoder(_settings()).geocode("nowhere at all") is None


def test_blank_address_does_not_call_the_service(monkeypatch):
    def boom(*a, **k):
        raise AssertionError("should not be called")

    monkeypatch.setattr(geocoding, "get_json", boom)
    assert GoogleGeocoder(_settings()).geocode("   ") is None


def test_refused_request_raises(monkeypatch):
    monkeypatch.setattr(
        geocoding, "get_json", lambda *a, **k: {"status": "REQUEST_DENIED", "error_message": "bad key"}
    )
    with pytest.raises(GeocodingError, match="REQUEST_DENIED"):
        GoogleGeocoder(_settings()).geocode("Austin")


def test_missing_key_raises():
    with pytest.raises(GeocodingError, match="GOOGLE_MAPS_API_KEY"):
        GoogleGeocoder(_settings(api_key=None)).geocode("Austin")


def test_reverse_geocode_keeps_input_coordinates(monkeypatch):
    seen = {}

    def fake_get_json(url, *, params=None, headers=None, timeout_seconds=15):
        seen.update(params)
        return {"status": "OK", "results": [AUSTIN_RESULT]}

    monkeypatch.setattr(geocoding, "get_json", fake_get_json)
    result = GoogleGeocoder(_settings()).reverse_geocode(30.25, -97.75)

    assert seen["latlng"] == "30.25,-97.75"
    assert (result.latitude, result.longitude) == (30.25, -97.75)
    assert result.city == "Austin"
