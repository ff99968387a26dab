"""
API routes.

Endpoints (all pages of the site are thin callers over the discovery engine):
- GET  `/api/vendors`: active vendors, optionally radius-ranked around `lat`/`lng`.
- GET  `/api/vendors/{id}`: one active vendor.
- GET  `/api/search/{location}`: point search page data (`lat`, `lng`, `address`).
- GET  `/api/regions/{state}[/{city_or_service}[/{service}]]`: programmatic SEO pages.
- GET  `/api/paths`: every SEO path.
- GET  `/api/map/config`, `/api/map/vendors`: map bootstrap + clustered points.
- POST `/api/submit-vendor`: vendor submission intake (camelCase body, e.g. `businessName`).
- `/api/admin/*`: review queue, status changes, data quality.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from functools import lru_cache
from typing import Any

import httpx
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from pasturepickup.catalog.locations import DEFAULT_CATALOG, LocationCatalog
from pasturepickup.catalog.regions import LIVESTOCK_SPECIES, SERVICE_TYPE_LABELS
from pasturepickup.config.settings import get_settings
from pasturepickup.core.errors import (
    GeocodingError,
    MapProviderError,
    NotFoundError,
    RepositoryError,
    SubmissionStateError,
    SubmissionValidationError,
)
from pasturepickup.core.geo import GeoPoint, is_valid_coordinate
from pasturepickup.core.text import location_name_from_slug, location_slug
from pasturepickup.discovery.engine import DiscoveryEngine, paginate
from pasturepickup.discovery.map_view import fit_view, vendor_feature_collection
from pasturepickup.domain.models import CityMatch, RankedVendor, Service, State, Vendor, VendorStatus
from pasturepickup.ingestion.geocoding import Geocoder, GoogleGeocoder
from pasturepickup.intake.submission import SubmissionIntake
from pasturepickup.maps.provider import get_map_provider
from pasturepickup.quality.report import build_quality_report
from pasturepickup.storage.repository import VendorRepository, build_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@lru_cache
def _repository() -> VendorRepository:
    return build_repository(get_settings())


@lru_cache
def _geocoder() -> Geocoder:
    return GoogleGeocoder(get_settings())


@lru_cache
def _engine() -> DiscoveryEngine:
    return DiscoveryEngine.from_settings(get_settings())


def _catalog() -> LocationCatalog:
    return DEFAULT_CATALOG


def _intake() -> SubmissionIntake:
    return SubmissionIntake(_repository(), _geocoder(), settings=get_settings())


@contextmanager
def _api_errors() -> Iterator[None]:
    """Translate core exceptions into JSON HTTP errors."""
    try:
        yield
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(e)}) from e
    except SubmissionValidationError as e:
        raise HTTPException(
            status_code=400,
            detail={"code": "VALIDATION_ERROR", "field": e.field, "message": e.message},
        ) from e
    except SubmissionStateError as e:
        raise HTTPException(status_code=409, detail={"code": "INVALID_STATE", "message": str(e)}) from e
    except (httpx.HTTPError, GeocodingError, RepositoryError) as e:
        logger.error("Upstream failure: %s", e)
        raise HTTPException(status_code=502, detail={"code": "UPSTREAM_ERROR", "message": str(e)}) from e


def _page_payload(items: Sequence[Vendor], *, page: int, page_size: int) -> dict[str, Any]:
    pages = paginate(items, page_size)
    return {
        "items": [v.model_dump(mode="json") for v in pages.page(page - 1)],
        "page": page,
        "page_size": pages.page_size,
        "page_count": pages.page_count,
        "total": pages.total_items,
    }


def _page_size(value: int | None) -> int:
    return int(value or get_settings().discovery.page_size)


def _split_csv(value: str | None) -> list[str]:
    return [s.strip() for s in (value or "").split(",") if s.strip()]


def _state_payload(state: State) -> dict[str, Any]:
    return {"name": state.name, "code": state.code, "slug": state.slug, "major_cities": list(state.major_cities)}


def _service_payload(service: Service) -> dict[str, Any]:
    return {"slug": service.slug, "display_name": service.display_name}


@router.get("/api/vendors")
def get_vendors(
    lat: float | None = None,
    lng: float | None = None,
    radius: float | None = Query(default=None, description="Search radius in miles (default from settings)."),
    service_types: str | None = Query(default=None, alias="serviceTypes", description="Comma-separated service labels."),
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=100),
) -> dict:
    """Active vendors; radius-ranked when `lat`/`lng` are given."""
    with _api_errors():
        vendors = _repository().fetch(status="Active", service_types=_split_csv(service_types) or None)

    engine = _engine()
    if lat is not None and lng is not None:
        ranked = engine.find_by_radius(vendors, GeoPoint(lat=lat, lng=lng), radius)
    else:
        ranked = engine.unranked(vendors)
    return _page_payload(ranked, page=page, page_size=_page_size(page_size))


@router.get("/api/vendors/{vendor_id}")
def get_vendor(vendor_id: str) -> dict:
    with _api_errors():
        vendor = _repository().fetch_by_id(vendor_id)
        if vendor is None or not vendor.is_active:
            raise NotFoundError("vendor", vendor_id)
    return vendor.model_dump(mode="json")


@router.get("/api/search/{location}")
def get_search(
    location: str,
    lat: float | None = None,
    lng: float | None = None,
    address: str | None = None,
    radius: float | None = None,
    page: int = Query(default=1, ge=1),
    page_size: int | None = Query(default=None, ge=1, le=100),
) -> dict:
    """Point search results page data."""
    with _api_errors():
        if lat is None or lng is None or not is_valid_coordinate(lat, lng):
            raise NotFoundError("search location", location)
        vendors = _repository().fetch(status="Active")

    engine = _engine()
    center = GeoPoint(lat=lat, lng=lng)
    ranked: list[RankedVendor] = engine.find_by_radius(vendors, center, radius)
    name = location_name_from_slug(location)
    return {
        "location": {
            "slug": location_slug(name),
            "name": name,
            "address": address or name,
            "lat": lat,
            "lng": lng,
        },
        "radius_miles": engine.default_radius_miles if radius is None else radius,
        "map": fit_view(ranked, center=center).as_dict(),
        **_page_payload(ranked, page=page, page_size=_page_size(page_size)),
    }


def _region_response(
    *, state: State, city: CityMatch | None = None, service: Service | None = None
) -> dict[str, Any]:
    with _api_errors():
        vendors = _repository().fetch(status="Active")

    engine = _engine()
    match = engine.find_by_region(vendors, state, city.city if city else None, service)
    payload: dict[str, Any] = {
        "state": _state_payload(state),
        "city": city.city if city else None,
        "service": _service_payload(service) if service else None,
        "local": [v.model_dump(mode="json") for v in match.local],
        "nearby": [v.model_dump(mode="json") for v in match.nearby],
        "map": fit_view(match.local).as_dict(),
    }
    if city is None:
        payload["city_counts"] = engine.count_by_city(match.local, state)
    return payload


@router.get("/api/regions/{state_slug}")
def get_state_region(state_slug: str) -> dict:
    with _api_errors():
        state = _catalog().require_state(state_slug)
    return _region_response(state=state)


@router.get("/api/regions/{state_slug}/{segment}")
def get_state_sub_region(state_slug: str, segment: str) -> dict:
    """`segment` is a service slug (state + service page) or a city slug."""
    catalog = _catalog()
    with _api_errors():
        state = catalog.require_state(state_slug)
        if catalog.is_service_slug(segment):
            return _region_response(state=state, service=catalog.require_service(segment))
        city = catalog.require_city(state_slug, segment)
    return _region_response(state=state, city=city)


@router.get("/api/regions/{state_slug}/{city_slug}/{service_slug}")
def get_city_service_region(state_slug: str, city_slug: str, service_slug: str) -> dict:
    catalog = _catalog()
    with _api_errors():
        city = catalog.require_city(state_slug, city_slug)
        service = catalog.require_service(service_slug)
    return _region_response(state=city.state, city=city, service=service)


@router.get("/api/paths")
def get_paths() -> dict:
    """Every programmatic SEO path (drives the sitemap)."""
    paths = _catalog().enumerate_all_paths()
    return {"count": len(paths), "paths": paths}


@router.get("/api/catalog")
def get_catalog() -> dict:
    """States, service pages and form options for clients."""
    catalog = _catalog()
    return {
        "states": [_state_payload(s) for s in catalog.states],
        "services": [_service_payload(s) for s in catalog.services],
        "service_types": list(SERVICE_TYPE_LABELS),
        "species": list(LIVESTOCK_SPECIES),
    }


@router.get("/api/map/config")
def get_map_config() -> dict:
    try:
        config = get_map_provider().config(timeout=5)
    except MapProviderError as e:
        raise HTTPException(status_code=503, detail={"code": "MAP_UNAVAILABLE", "message": str(e)}) from e
    return {
        "access_token": config.access_token,
        "style_url": config.style_url,
        "center": list(config.default_center),
        "zoom": config.default_zoom,
    }


@router.get("/api/map/vendors")
def get_map_vendors() -> dict:
    """Clustered national view: GeoJSON points plus the fit for all of them."""
    with _api_errors():
        vendors = _repository().fetch(status="Active")
    return {
        "geojson": vendor_feature_collection(vendors),
        "map": fit_view(vendors, mode="us").as_dict(),
    }


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("x-real-ip") or "unknown"


class VendorSubmissionIn(BaseModel):
    """Submission form body. Keys are camelCase like the rest of the API (`businessName`);
    snake_case keys are accepted too. Values stay loose here: `SubmissionIntake`
    normalizes them and reports the offending field.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    business_name: Any = None
    contact_name: Any = None
    phone: Any = None
    email: Any = None
    address: Any = None
    city: Any = None
    state: Any = None
    state_code: Any = None
    latitude: Any = None
    longitude: Any = None
    services: Any = None
    species: Any = None
    description: Any = None
    website: Any = None
    service_radius: Any = None
    emergency_service: Any = None
    business_hours: Any = None


@router.post("/api/submit-vendor", status_code=201)
def post_submit_vendor(request: Request, payload: VendorSubmissionIn) -> dict:
    """Validate, geocode and store a vendor submission for review."""
    with _api_errors():
        submission_id = _intake().submit(payload.model_dump(exclude_none=True), submitter_ip=_client_ip(request))
    return {"message": "Vendor submitted successfully", "submission_id": submission_id}


@router.get("/api/admin/vendors")
def get_admin_vendors() -> dict:
    """All vendors regardless of status."""
    with _api_errors():
        vendors = _repository().fetch()
    return {"vendors": [v.model_dump(mode="json") for v in vendors]}


@router.get("/api/admin/submissions")
def get_admin_submissions() -> dict:
    with _api_errors():
        pending = _repository().list_pending()
    return {"submissions": [s.model_dump(mode="json") for s in pending]}


@router.post("/api/admin/submissions/{submission_id}/approve")
def post_approve_submission(submission_id: str) -> dict:
    with _api_errors():
        vendor_id = _intake().approve(submission_id)
    return {"submission_id": submission_id, "submission_status": "Approved", "vendor_id": vendor_id}


@router.post("/api/admin/submissions/{submission_id}/reject")
def post_reject_submission(submission_id: str) -> dict:
    with _api_errors():
        _intake().reject(submission_id)
    return {"submission_id": submission_id, "submission_status": "Rejected"}


class VendorStatusUpdate(BaseModel):
    status: VendorStatus


@router.put("/api/admin/vendors/{vendor_id}/status")
def put_vendor_status(vendor_id: str, update: VendorStatusUpdate) -> dict:
    status = update.status
    with _api_errors():
        _repository().set_vendor_status(vendor_id, status)
    return {"vendor_id": vendor_id, "status": status}


@router.get("/api/admin/quality")
def get_quality_report() -> dict:
    with _api_errors():
        vendors = _repository().fetch()
    return build_quality_report(vendors, _catalog())
