"""
Vendor submission intake.

Validates and normalizes a prospective vendor's form payload, makes sure it has
coordinates (geocoding the address when the client did not send any), and stores it
as a Pending submission. Admins later approve (copy into an Active vendor) or reject.

Data flow: API/CLI payload -> `SubmissionIntake.submit` -> geocoder -> repository.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from math import isfinite
from typing import Any

from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import SubmissionValidationError
from pasturepickup.core.geo import is_valid_coordinate
from pasturepickup.domain.models import DEFAULT_SERVICE_RADIUS_MILES, Submission, Vendor
from pasturepickup.ingestion.geocoding import Geocoder
from pasturepickup.storage.repository import VendorRepository

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("business_name", "contact_name", "phone", "email", "address", "description", "services")

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_FALSE_STRINGS = {"", "0", "false", "no", "off", "n"}


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _labels(value: Any) -> list[str]:
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def normalize_service_radius(value: Any, default: int = DEFAULT_SERVICE_RADIUS_MILES) -> int:
    """Parse a leading integer ("30", "30 miles", 30.7); fall back to `default` otherwise."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        radius = int(value) if isfinite(value) else 0
    else:
        match = _LEADING_INT.match(str(value))
        radius = int(match.group(1)) if match else 0
    return radius if radius > 0 else default


def _missing(field: str, value: Any) -> bool:
    if field == "services":
        return not _labels(value)
    return not _text(value)


def submission_to_vendor(submission: Submission) -> Vendor:
    """Promote an approved submission into an Active vendor (field-for-field copy)."""
    return Vendor(
        id="",
        name=submission.business_name,
        phone=submission.phone,
        email=submission.email,
        website=submission.website or None,
        address=submission.address,
        city=submission.city,
        state=submission.state,
        state_code=submission.state_code,
        latitude=submission.latitude,
        longitude=submission.longitude,
        service_types=list(submission.services),
        species=list(submission.species),
        service_radius=submission.service_radius,
        description=submission.description,
        status="Active",
        emergency_service=submission.emergency_service,
        business_hours=submission.business_hours,
    )


class SubmissionIntake:
    """Validate, geocode and persist vendor submissions; run admin transitions."""

    def __init__(self, repository: VendorRepository, geocoder: Geocoder, *, settings: Settings | None = None):
        self._repository = repository
        self._geocoder = geocoder
        self._default_radius = (
            settings.discovery.default_service_radius_miles if settings else DEFAULT_SERVICE_RADIUS_MILES
        )

    def build_submission(self, payload: Mapping[str, Any], *, submitter_ip: str = "unknown") -> Submission:
        """Validate + normalize a payload into a Pending `Submission` (no persistence).

        Raises:
            SubmissionValidationError: missing required field or un-geocodable address.
        """
        for field in REQUIRED_FIELDS:
            if _missing(field, payload.get(field)):
                raise SubmissionValidationError(field, f"Missing required field: {field}")

        address = _text(payload.get("address"))
        latitude = _as_float(payload.get("latitude"))
        longitude = _as_float(payload.get("longitude"))
        city = _text(payload.get("city"))
        state = _text(payload.get("state"))
        state_code = _text(payload.get("state_code")).upper()

        if not is_valid_coordinate(latitude, longitude):
            geocoded = self._geocoder.geocode(address)
            if geocoded is None:
                raise SubmissionValidationError("address", "Unable to geocode the provided address")
            latitude, longitude = geocoded.latitude, geocoded.longitude
            city = city or geocoded.city
            state = state or geocoded.state
            state_code = state_code or geocoded.state_code.upper()

        return Submission(
            business_name=_text(payload.get("business_name")),
            contact_name=_text(payload.get("contact_name")),
            phone=_text(payload.get("phone")),
            email=_text(payload.get("email")),
            address=address,
            city=city,
            state=state,
            state_code=state_code,
            latitude=latitude,
            longitude=longitude,
            services=_labels(payload.get("services")),
            species=_labels(payload.get("species")),
            description=_text(payload.get("description")),
            website=_text(payload.get("website")),
            service_radius=normalize_service_radius(payload.get("service_radius"), self._default_radius),
            emergency_service=_as_bool(payload.get("emergency_service")),
            business_hours=_text(payload.get("business_hours")),
            submission_status="Pending",
            submitter_ip=_text(submitter_ip) or "unknown",
        )

    def submit(self, payload: Mapping[str, Any], *, submitter_ip: str = "unknown") -> str:
        """Validate and store a submission; returns the repository-assigned id."""
        try:
            submission = self.build_submission(payload, submitter_ip=submitter_ip)
        except SubmissionValidationError as e:
            logger.warning("Rejected submission from %s: %s (%s)", submitter_ip, e.message, e.field)
            raise

        submission_id = self._repository.create_submission(submission)
        logger.info("Accepted submission %s for %r", submission_id, submission.business_name)
        return submission_id

    def approve(self, submission_id: str) -> str:
        """Claim a Pending submission as Approved, then create its Active vendor.

        The status is claimed first so concurrent approvals create at most one vendor.
        If vendor creation fails the claim is released back to Pending.
        Returns the new vendor id.
        """
        claimed = self._repository.transition_submission(submission_id, expected="Pending", new="Approved")
        try:
            vendor_id = self._repository.create_vendor(submission_to_vendor(claimed))
        except Exception:
            logger.error("Vendor creation failed for submission %s; releasing approval", submission_id)
            self._repository.transition_submission(submission_id, expected="Approved", new="Pending")
            raise
        logger.info("Approved submission %s -> vendor %s", submission_id, vendor_id)
        return vendor_id

    def reject(self, submission_id: str) -> None:
        self._repository.transition_submission(submission_id, expected="Pending", new="Rejected")
        logger.info("Rejected submission %s", submission_id)
