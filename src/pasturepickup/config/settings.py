# src/pasturepickup/config/settings.py
"""
Application settings (Pydantic).

Settings are loaded from `src/pasturepickup/config/defaults.yaml`, then optionally overridden by:
- environment variables (e.g., `AIRTABLE_API_KEY`, `GOOGLE_MAPS_API_KEY`)
- an external YAML file via `PASTUREPICKUP_CONFIG_PATH`

Design rule:
- Tuning knobs (radii, caps, page sizes, matching policy) live in YAML, not in discovery code.
"""

from __future__ import annotations

import os
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field

from pasturepickup.core.env import load_dotenv_if_present


def _read_package_yaml(filename: str) -> dict[str, Any]:
    """Read a YAML file packaged inside `pasturepickup.config`."""
    text = resources.files("pasturepickup.config").joinpath(filename).read_text(encoding="utf-8")
    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {filename}; expected a mapping.")
    return data


def _read_yaml_file(path: str | Path) -> dict[str, Any]:
    """Read a YAML file from disk and return its mapping root."""
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid YAML root object for {path}; expected a mapping.")
    return data


class AppSettings(BaseModel):
    name: str = "Pasture Pickup"
    http_timeout_seconds: float = 15
    log_level: str = "INFO"


class DiscoverySettings(BaseModel):
    default_search_radius_miles: float = Field(50, gt=0)
    default_service_radius_miles: int = Field(25, gt=0)
    nearby_limit: int = Field(3, ge=0)
    page_size: int = Field(8, ge=1)
    service_match: Literal["loose", "exact"] = "loose"


class AirtableSettings(BaseModel):
    base_url: str = "https://api.airtable.com/v0"
    base_id: str | None = None
    api_key: str | None = None
    vendors_table: str = "Vendors"
    submissions_table: str = "Vendor Submissions"
    page_size: int = Field(100, ge=1, le=100)


class StorageSettings(BaseModel):
    backend: Literal["memory", "airtable"] = "memory"
    seed_path: str = "data/vendors.json"
    airtable: AirtableSettings = Field(default_factory=AirtableSettings)


class GeocodingSettings(BaseModel):
    base_url: str = "https://maps.googleapis.com/maps/api/geocode/json"
    api_key: str | None = None
    country: str = "US"


class MapSettings(BaseModel):
    access_token: str | None = None
    style_url: str = "mapbox://styles/mapbox/streets-v12"
    default_center_lat: float = Field(39.8283, ge=-90, le=90)
    default_center_lng: float = Field(-98.5795, ge=-180, le=180)
    default_zoom: float = 4


class Settings(BaseModel):
    app: AppSettings = Field(default_factory=AppSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    geocoding: GeocodingSettings = Field(default_factory=GeocodingSettings)
    maps: MapSettings = Field(default_factory=MapSettings)


def _apply_env_overrides(data: dict[str, Any]) -> dict[str, Any]:
    """Overlay selected environment variables onto raw settings payload.

    Note: We intentionally keep this whitelist small; secrets only ever come from the environment.
    """
    load_dotenv_if_present()
    data = dict(data)

    log_level = os.getenv("PASTUREPICKUP_LOG_LEVEL")
    if log_level:
        data.setdefault("app", {})["log_level"] = log_level

    backend = os.getenv("PASTUREPICKUP_STORAGE_BACKEND")
    if backend:
        data.setdefault("storage", {})["backend"] = backend

    seed_path = os.getenv("PASTUREPICKUP_SEED_PATH")
    if seed_path:
        data.setdefault("storage", {})["seed_path"] = seed_path

    airtable_key = os.getenv("AIRTABLE_API_KEY")
    airtable_base = os.getenv("AIRTABLE_BASE_ID")
    if airtable_key:
        data.setdefault("storage", {}).setdefault("airtable", {})["api_key"] = airtable_key
    if airtable_base:
        data.setdefault("storage", {}).setdefault("airtable", {})["base_id"] = airtable_base

    google_key = os.getenv("GOOGLE_MAPS_API_KEY")
    if google_key:
        data.setdefault("geocoding", {})["api_key"] = google_key

    mapbox_token = os.getenv("MAPBOX_ACCESS_TOKEN")
    if mapbox_token:
        data.setdefault("maps", {})["access_token"] = mapbox_token

    return data


@lru_cache
def get_settings() -> Settings:
    """Load and validate settings (cached)."""
    load_dotenv_if_present()
    config_path = os.getenv("PASTUREPICKUP_CONFIG_PATH")
    raw = _read_yaml_file(config_path) if config_path else _read_package_yaml("defaults.yaml")
    raw = _apply_env_overrides(raw)
    return Settings.model_validate(raw)


@lru_cache
def get_logging_config() -> dict[str, Any]:
    """Load logging configuration (cached)."""
    return _read_package_yaml("logging.yaml")
