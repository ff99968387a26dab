"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- repository records (`Vendor`, `Submission`)
- static catalog entities (`State`, `Service`, `CityMatch`)
- discovery output (`RankedVendor`, `RegionMatch`)

Keeping these models in one place helps:
- validation (malformed records are normalized once, when they are parsed),
- consistent JSON output across CLI/API.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from pasturepickup.core.geo import GeoPoint, is_valid_coordinate
from pasturepickup.core.text import slugify

VendorStatus = Literal["Active", "Pending", "Inactive"]
SubmissionStatus = Literal["Pending", "Approved", "Rejected"]

DEFAULT_SERVICE_RADIUS_MILES = 25

# Validation context key: loaders pass the configured fallback radius under this name.
SERVICE_RADIUS_CONTEXT_KEY = "default_service_radius_miles"


def _split_labels(value: Any) -> list[str]:
    if value is None:
        return []
    raw = str(value).split(",") if isinstance(value, str) else list(value)
    return [str(v).strip() for v in raw if v is not None and str(v).strip()]


def _coerce_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _context_radius(info: ValidationInfo) -> int:
    context = info.context or {}
    return int(context.get(SERVICE_RADIUS_CONTEXT_KEY) or DEFAULT_SERVICE_RADIUS_MILES)


def _coerce_radius(value: Any, default: int = DEFAULT_SERVICE_RADIUS_MILES) -> int:
    if isinstance(value, bool):
        return default
    try:
        radius = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default
    return radius if radius > 0 else default


class Vendor(BaseModel):
    """A service provider listing."""

    id: str
    name: str = ""
    phone: str = ""
    email: str = ""
    website: str | None = None
    address: str = ""
    city: str = ""
    state: str = ""
    state_code: str = ""
    latitude: float | None = None
    longitude: float | None = None
    service_types: list[str] = Field(default_factory=list)
    species: list[str] = Field(default_factory=list)
    # Missing values also go through `_normalize_radius` so the configured fallback applies.
    service_radius: int = Field(default=None, validate_default=True)
    description: str = ""
    status: VendorStatus = "Pending"
    emergency_service: bool = False
    insurance_certified: bool = False
    business_hours: str = ""
    featured_image: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("name", "phone", "email", "address", "city", "state", "description", "business_hours", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("state_code", mode="before")
    @classmethod
    def _normalize_state_code(cls, value: Any) -> str:
        return str(value or "").strip().upper()

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _coerce_coordinate(cls, value: Any) -> float | None:
        return _coerce_float(value)

    @field_validator("service_types", "species", mode="before")
    @classmethod
    def _normalize_labels(cls, value: Any) -> list[str]:
        return _split_labels(value)

    @field_validator("service_radius", mode="before")
    @classmethod
    def _normalize_radius(cls, value: Any, info: ValidationInfo) -> int:
        return _coerce_radius(value, _context_radius(info))

    @model_validator(mode="after")
    def _drop_invalid_coordinates(self) -> "Vendor":
        # A half-present or out-of-range pair is treated as "no coordinates".
        if not is_valid_coordinate(self.latitude, self.longitude):
            self.latitude = None
            self.longitude = None
        return self

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def point(self) -> GeoPoint | None:
        if self.latitude is None or self.longitude is None:
            return None
        return GeoPoint(lat=self.latitude, lng=self.longitude)

    @property
    def is_active(self) -> bool:
        return self.status == "Active"


class RankedVendor(Vendor):
    """A vendor annotated with its distance from the query point (if any)."""

    distance_miles: float | None = None

    @classmethod
    def from_vendor(cls, vendor: Vendor, distance_miles: float | None = None) -> "RankedVendor":
        return cls.model_validate({**vendor.model_dump(), "distance_miles": distance_miles})


class Submission(BaseModel):
    """A prospective vendor awaiting admin review."""

    id: str | None = None
    business_name: str
    contact_name: str
    phone: str
    email: str
    address: str
    city: str = ""
    state: str = ""
    state_code: str = ""
    # Intake guarantees coordinates and services; records created elsewhere may lack them.
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    services: list[str] = Field(default_factory=list)
    species: list[str] = Field(default_factory=list)
    description: str = ""
    website: str = ""
    service_radius: int = Field(default=None, validate_default=True)
    emergency_service: bool = False
    business_hours: str = ""
    submission_status: SubmissionStatus = "Pending"
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    submitter_ip: str = "unknown"

    @field_validator(
        "business_name", "contact_name", "phone", "email", "address", "city", "state", "description",
        "website", "business_hours", mode="before",
    )
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("services", "species", mode="before")
    @classmethod
    def _normalize_labels(cls, value: Any) -> list[str]:
        return _split_labels(value)

    @field_validator("service_radius", mode="before")
    @classmethod
    def _normalize_radius(cls, value: Any, info: ValidationInfo) -> int:
        return _coerce_radius(value, _context_radius(info))

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class Service(BaseModel):
    """A fixed service category with a stable URL slug."""

    model_config = ConfigDict(frozen=True)

    slug: str
    display_name: str


class State(BaseModel):
    """A US state with its bounded list of SEO "major cities"."""

    model_config = ConfigDict(frozen=True)

    name: str
    code: str
    major_cities: tuple[str, ...] = ()

    @property
    def slug(self) -> str:
        return slugify(self.name)


class CityMatch(BaseModel):
    """A major city resolved together with its state."""

    model_config = ConfigDict(frozen=True)

    city: str
    state: State

    @property
    def slug(self) -> str:
        return slugify(self.city)


class RegionMatch(BaseModel):
    """Region query output: vendors in the region plus a capped same-state overflow."""

    local: list[Vendor] = Field(default_factory=list)
    nearby: list[Vendor] = Field(default_factory=list)
