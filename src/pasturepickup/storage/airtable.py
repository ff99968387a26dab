"""
Airtable-backed vendor repository.

This module is responsible only for:
- building Airtable list/get/create/update requests (REST, `offset` pagination),
- mapping Airtable records to `Vendor` / `Submission` and back.

It never applies geographic filtering; see `pasturepickup.discovery.engine` for that.
Errors from Airtable propagate as `httpx.HTTPError` (except 404 on single-record
lookups, which means "not found").
Malformed rows are skipped (with a warning) in list results and raise
`RepositoryError` on single-record lookups.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from pasturepickup.config.settings import Settings
from pasturepickup.core.errors import NotFoundError, RepositoryError, SubmissionStateError
from pasturepickup.core.http import get_json, patch_json, post_json
from pasturepickup.domain.models import (
    DEFAULT_SERVICE_RADIUS_MILES,
    SERVICE_RADIUS_CONTEXT_KEY,
    Submission,
    SubmissionStatus,
    Vendor,
    VendorStatus,
)

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _escape_formula(value: str) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def build_vendor_formula(*, status: str | None = None, service_types: Sequence[str] | None = None) -> str | None:
    """Build the `filterByFormula` expression for a coarse vendor fetch."""
    clauses: list[str] = []
    if status:
        clauses.append(f'{{Status}} = "{_escape_formula(status)}"')
    if service_types:
        finds = [f'FIND("{_escape_formula(s)}", {{ServicesType}}) > 0' for s in service_types]
        clauses.append(f"OR({', '.join(finds)})")
    if not clauses:
        return None
    return f"AND({', '.join(clauses)})"


def _featured_image(value: Any) -> str | None:
    # Attachment fields come back as a list of {url, ...}; older rows hold a plain URL.
    if isinstance(value, list):
        first = value[0] if value else None
        return first.get("url") if isinstance(first, dict) else None
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def record_to_vendor(record: dict[str, Any], *, default_service_radius: int = DEFAULT_SERVICE_RADIUS_MILES) -> Vendor:
    fields = record.get("fields") or {}
    return Vendor.model_validate(
        {
            "id": record.get("id"),
            "name": fields.get("Name"),
            "phone": fields.get("Phone"),
            "email": fields.get("Email"),
            "website": fields.get("Website"),
            "address": fields.get("Address"),
            "city": fields.get("City"),
            "state": fields.get("State"),
            "state_code": fields.get("StateCode"),
            "latitude": fields.get("Latitude"),
            "longitude": fields.get("Longitude"),
            "service_types": fields.get("ServicesType"),
            "species": fields.get("Species"),
            "service_radius": fields.get("ServiceRadius"),
            "description": fields.get("Description"),
            "status": fields.get("Status") or "Pending",
            "emergency_service": bool(fields.get("EmergencyService") or False),
            "insurance_certified": bool(fields.get("InsuranceCertified") or False),
            "business_hours": fields.get("BusinessHours"),
            "featured_image": _featured_image(fields.get("FeaturedImage")),
            "created_at": fields.get("CreatedAt") or record.get("createdTime"),
            "updated_at": fields.get("UpdatedAt"),
        },
        context={SERVICE_RADIUS_CONTEXT_KEY: default_service_radius},
    )


def vendor_to_fields(vendor: Vendor) -> dict[str, Any]:
    now = _now_iso()
    fields: dict[str, Any] = {
        "Name": vendor.name,
        "Phone": vendor.phone,
        "Email": vendor.email,
        "Website": vendor.website,
        "Address": vendor.address,
        "City": vendor.city,
        "State": vendor.state,
        "StateCode": vendor.state_code,
        "Latitude": vendor.latitude,
        "Longitude": vendor.longitude,
        "ServicesType": ",".join(vendor.service_types),
        "Species": ",".join(vendor.species),
        "ServiceRadius": vendor.service_radius,
        "Description": vendor.description,
        "Status": vendor.status,
        "EmergencyService": vendor.emergency_service,
        "InsuranceCertified": vendor.insurance_certified,
        "BusinessHours": vendor.business_hours,
        "CreatedAt": now,
        "UpdatedAt": now,
    }
    if vendor.featured_image:
        fields["FeaturedImage"] = [{"url": vendor.featured_image}]
    return {k: v for k, v in fields.items() if v is not None}


def record_to_submission(
    record: dict[str, Any], *, default_service_radius: int = DEFAULT_SERVICE_RADIUS_MILES
) -> Submission:
    fields = record.get("fields") or {}
    return Submission.model_validate(
        {
            "id": record.get("id"),
            "business_name": fields.get("BusinessName"),
            "contact_name": fields.get("ContactName"),
            "phone": fields.get("Phone"),
            "email": fields.get("Email"),
            "address": fields.get("Address"),
            "city": fields.get("City"),
            "state": fields.get("State"),
            "state_code": fields.get("StateCode") or "",
            "latitude": fields.get("Latitude"),
            "longitude": fields.get("Longitude"),
            "services": fields.get("Services"),
            "species": fields.get("Species"),
            "description": fields.get("Description"),
            "website": fields.get("Website"),
            "service_radius": fields.get("ServiceRadius"),
            "emergency_service": bool(fields.get("EmergencyService") or False),
            "business_hours": fields.get("BusinessHours"),
            "submission_status": fields.get("SubmissionStatus") or "Pending",
            "submitted_at": fields.get("SubmittedAt") or record.get("createdTime"),
            "submitter_ip": fields.get("SubmitterIP") or "unknown",
        },
        context={SERVICE_RADIUS_CONTEXT_KEY: default_service_radius},
    )


def submission_to_fields(submission: Submission) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "BusinessName": submission.business_name,
        "ContactName": submission.contact_name,
        "Phone": submission.phone,
        "Email": submission.email,
        "Address": submission.address,
        "City": submission.city,
        "State": submission.state,
        "StateCode": submission.state_code,
        "Latitude": submission.latitude,
        "Longitude": submission.longitude,
        "Services": ",".join(submission.services),
        "Species": ",".join(submission.species),
        "Description": submission.description,
        "Website": submission.website,
        "ServiceRadius": submission.service_radius,
        "EmergencyService": submission.emergency_service,
        "BusinessHours": submission.business_hours,
        "SubmissionStatus": submission.submission_status,
        "SubmittedAt": submission.submitted_at.isoformat(),
        "SubmitterIP": submission.submitter_ip,
    }
    return {k: v for k, v in fields.items() if v is not None}


class AirtableVendorRepository:
    """Vendor + submission tables stored in one Airtable base."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._transition_lock = threading.Lock()

    def _airtable(self):
        return self._settings.storage.airtable

    def _headers(self) -> dict[str, str]:
        api_key = self._airtable().api_key
        if not api_key:
            raise RepositoryError("Missing Airtable credentials. Set AIRTABLE_API_KEY in env or .env.")
        return {"Authorization": f"Bearer {api_key}"}

    def _table_url(self, table: str, record_id: str | None = None) -> str:
        airtable = self._airtable()
        if not airtable.base_id:
            raise RepositoryError("Missing Airtable base id. Set AIRTABLE_BASE_ID in env or .env.")
        url = f"{airtable.base_url.rstrip('/')}/{airtable.base_id}/{quote(table, safe='')}"
        return f"{url}/{quote(record_id, safe='')}" if record_id else url

    def _timeout(self) -> float:
        return self._settings.app.http_timeout_seconds

    def _list_records(
        self,
        table: str,
        *,
        formula: str | None,
        sort_field: str,
        sort_direction: str = "asc",
    ) -> list[dict[str, Any]]:
        """Fetch every record of a table view, following Airtable's `offset` cursor."""
        records: list[dict[str, Any]] = []
        offset: str | None = None

        while True:
            params: list[tuple[str, Any]] = [
                ("pageSize", self._airtable().page_size),
                ("sort[0][field]", sort_field),
                ("sort[0][direction]", sort_direction),
            ]
            if formula:
                params.append(("filterByFormula", formula))
            if offset:
                params.append(("offset", offset))

            page = get_json(
                self._table_url(table), params=params, headers=self._headers(), timeout_seconds=self._timeout()
            )
            if not isinstance(page, dict) or not isinstance(page.get("records"), list):
                raise RepositoryError("Unexpected Airtable response shape; expected {'records': [...]}.")

            records.extend(page["records"])
            offset = page.get("offset")
            if not offset:
                break

        return records

    def _get_record(self, table: str, record_id: str) -> dict[str, Any] | None:
        try:
            return get_json(
                self._table_url(table, record_id), headers=self._headers(), timeout_seconds=self._timeout()
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            raise

    def _update_fields(self, table: str, record_id: str, fields: dict[str, Any], *, kind: str) -> None:
        try:
            patch_json(
                self._table_url(table, record_id),
                payload={"fields": fields},
                headers=self._headers(),
                timeout_seconds=self._timeout(),
            )
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                raise NotFoundError(kind, record_id) from e
            raise

    def _create(self, table: str, fields: dict[str, Any]) -> str:
        created = post_json(
            self._table_url(table), payload={"fields": fields}, headers=self._headers(), timeout_seconds=self._timeout()
        )
        record_id = created.get("id") if isinstance(created, dict) else None
        if not record_id:
            raise RepositoryError("Airtable did not return a record id.")
        return str(record_id)

    def _default_radius(self) -> int:
        return self._settings.discovery.default_service_radius_miles

    def _to_vendor(self, record: dict[str, Any]) -> Vendor:
        return record_to_vendor(record, default_service_radius=self._default_radius())

    def _to_submission(self, record: dict[str, Any]) -> Submission:
        return record_to_submission(record, default_service_radius=self._default_radius())

    def _parse_all(self, records: list[dict[str, Any]], parse, kind: str) -> list:
        parsed = []
        for record in records:
            try:
                parsed.append(parse(record))
            except ValidationError as e:
                # A malformed row only drops out of the result.
                logger.warning("Skipping malformed %s record %s: %s", kind, record.get("id"), e)
        return parsed

    def _parse_one(self, record: dict[str, Any], parse, kind: str):
        try:
            return parse(record)
        except ValidationError as e:
            raise RepositoryError(f"Malformed {kind} record {record.get('id')}: {e}") from e

    def fetch(
        self, *, status: VendorStatus | None = None, service_types: Sequence[str] | None = None
    ) -> list[Vendor]:
        formula = build_vendor_formula(status=status, service_types=service_types)
        logger.info("Fetching vendors from Airtable (formula=%s)", formula)
        records = self._list_records(self._airtable().vendors_table, formula=formula, sort_field="Name")
        vendors = self._parse_all(records, self._to_vendor, "vendor")
        logger.info("Fetched %d vendors (%d records)", len(vendors), len(records))
        return vendors

    def fetch_by_id(self, vendor_id: str) -> Vendor | None:
        record = self._get_record(self._airtable().vendors_table, vendor_id)
        return self._parse_one(record, self._to_vendor, "vendor") if record else None

    def create_vendor(self, vendor: Vendor) -> str:
        return self._create(self._airtable().vendors_table, vendor_to_fields(vendor))

    def create_submission(self, submission: Submission) -> str:
        return self._create(self._airtable().submissions_table, submission_to_fields(submission))

    def fetch_submission(self, submission_id: str) -> Submission | None:
        record = self._get_record(self._airtable().submissions_table, submission_id)
        return self._parse_one(record, self._to_submission, "submission") if record else None

    def list_pending(self) -> list[Submission]:
        records = self._list_records(
            self._airtable().submissions_table,
            formula='{SubmissionStatus} = "Pending"',
            sort_field="SubmittedAt",
            sort_direction="desc",
        )
        return self._parse_all(records, self._to_submission, "submission")

    def transition_submission(
        self, submission_id: str, *, expected: SubmissionStatus, new: SubmissionStatus
    ) -> Submission:
        """Check-then-patch the submission status.

        Airtable has no conditional update, so the check and the patch are serialized
        per process only; two processes racing on one submission are not excluded.
        """
        with self._transition_lock:
            current = self.fetch_submission(submission_id)
            if current is None:
                raise NotFoundError("submission", submission_id)
            if current.submission_status != expected:
                raise SubmissionStateError(
                    f"Submission {submission_id} is {current.submission_status}, expected {expected}."
                )
            self._update_fields(
                self._airtable().submissions_table, submission_id, {"SubmissionStatus": new}, kind="submission"
            )
        return current.model_copy(update={"submission_status": new})

    def set_vendor_status(self, vendor_id: str, status: VendorStatus) -> None:
        self._update_fields(
            self._airtable().vendors_table,
            vendor_id,
            {"Status": status, "UpdatedAt": _now_iso()},
            kind="vendor",
        )
