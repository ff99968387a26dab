"""
Vendor repository contract + in-memory backend.

The repository only knows coarse server-side filters (status, service labels). All
geography and ranking happens in `pasturepickup.discovery.engine` over what it returns.

Backends:
- `InMemoryVendorRepository`: seeded from a local JSON file; used for development/tests.
- `AirtableVendorRepository` (`pasturepickup.storage.airtable`): the hosted database.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol
from uuid import uuid4

from pydantic import TypeAdapter

from pasturepickup.config.settings import Settings
from pasturepickup.core.env import resolve_project_path
from pasturepickup.core.errors import NotFoundError, SubmissionStateError
from pasturepickup.domain.models import (
    DEFAULT_SERVICE_RADIUS_MILES,
    SERVICE_RADIUS_CONTEXT_KEY,
    Submission,
    SubmissionStatus,
    Vendor,
    VendorStatus,
)
from pasturepickup.storage.airtable import AirtableVendorRepository

logger = logging.getLogger(__name__)

_VENDORS_ADAPTER = TypeAdapter(list[Vendor])


class VendorRepository(Protocol):
    def fetch(
        self, *, status: VendorStatus | None = None, service_types: Sequence[str] | None = None
    ) -> list[Vendor]: ...

    def fetch_by_id(self, vendor_id: str) -> Vendor | None: ...

    def create_vendor(self, vendor: Vendor) -> str: ...

    def create_submission(self, submission: Submission) -> str: ...

    def fetch_submission(self, submission_id: str) -> Submission | None: ...

    def list_pending(self) -> list[Submission]: ...

    def transition_submission(
        self, submission_id: str, *, expected: SubmissionStatus, new: SubmissionStatus
    ) -> Submission:
        """Move a submission from `expected` to `new` as one step; returns the updated record.

        Raises `NotFoundError` for unknown ids and `SubmissionStateError` when the
        current status is not `expected`.
        """
        ...

    def set_vendor_status(self, vendor_id: str, status: VendorStatus) -> None: ...


def load_vendors(path: str | Path, *, default_service_radius: int = DEFAULT_SERVICE_RADIUS_MILES) -> list[Vendor]:
    """Load and validate a vendor seed JSON file (a list of vendor objects).

    Records without a usable service radius get `default_service_radius`.
    """
    resolved = resolve_project_path(path)
    payload = json.loads(resolved.read_text(encoding="utf-8"))
    return _VENDORS_ADAPTER.validate_python(payload, context={SERVICE_RADIUS_CONTEXT_KEY: default_service_radius})


def matches_service_filter(vendor: Vendor, service_types: Sequence[str]) -> bool:
    """Coarse server-side label filter: any requested label occurs in the joined label text."""
    joined = ",".join(vendor.service_types)
    return any(s in joined for s in service_types)


def _new_record_id() -> str:
    return f"rec{uuid4().hex[:14]}"


class InMemoryVendorRepository:
    """Thread-safe in-process repository."""

    def __init__(self, vendors: Iterable[Vendor] = (), submissions: Iterable[Submission] = ()):
        self._lock = threading.Lock()
        self._vendors: dict[str, Vendor] = {v.id: v for v in vendors}
        self._submissions: dict[str, Submission] = {}
        for s in submissions:
            sid = s.id or _new_record_id()
            self._submissions[sid] = s.model_copy(update={"id": sid})

    @classmethod
    def from_seed_file(
        cls, path: str | Path, *, default_service_radius: int = DEFAULT_SERVICE_RADIUS_MILES
    ) -> "InMemoryVendorRepository":
        resolved = resolve_project_path(path)
        if not resolved.is_file():
            logger.warning("Vendor seed file not found: %s (starting empty)", resolved)
            return cls()
        vendors = load_vendors(resolved, default_service_radius=default_service_radius)
        logger.info("Loaded %d vendors from %s", len(vendors), resolved)
        return cls(vendors)

    def fetch(
        self, *, status: VendorStatus | None = None, service_types: Sequence[str] | None = None
    ) -> list[Vendor]:
        with self._lock:
            vendors = list(self._vendors.values())
        if status:
            vendors = [v for v in vendors if v.status == status]
        if service_types:
            vendors = [v for v in vendors if matches_service_filter(v, service_types)]
        return sorted(vendors, key=lambda v: v.name)

    def fetch_by_id(self, vendor_id: str) -> Vendor | None:
        with self._lock:
            return self._vendors.get(vendor_id)

    def create_vendor(self, vendor: Vendor) -> str:
        with self._lock:
            vendor_id = vendor.id or _new_record_id()
            self._vendors[vendor_id] = vendor.model_copy(update={"id": vendor_id})
        return vendor_id

    def create_submission(self, submission: Submission) -> str:
        with self._lock:
            submission_id = _new_record_id()
            self._submissions[submission_id] = submission.model_copy(update={"id": submission_id})
        return submission_id

    def fetch_submission(self, submission_id: str) -> Submission | None:
        with self._lock:
            return self._submissions.get(submission_id)

    def list_pending(self) -> list[Submission]:
        with self._lock:
            pending = [s for s in self._submissions.values() if s.submission_status == "Pending"]
        return sorted(pending, key=lambda s: s.submitted_at, reverse=True)

    def transition_submission(
        self, submission_id: str, *, expected: SubmissionStatus, new: SubmissionStatus
    ) -> Submission:
        with self._lock:
            current = self._submissions.get(submission_id)
            if current is None:
                raise NotFoundError("submission", submission_id)
            if current.submission_status != expected:
                raise SubmissionStateError(
                    f"Submission {submission_id} is {current.submission_status}, expected {expected}."
                )
            updated = current.model_copy(update={"submission_status": new})
            self._submissions[submission_id] = updated
        return updated

    def set_vendor_status(self, vendor_id: str, status: VendorStatus) -> None:
        with self._lock:
            current = self._vendors.get(vendor_id)
            if current is None:
                raise NotFoundError("vendor", vendor_id)
            self._vendors[vendor_id] = current.model_copy(update={"status": status})


def build_repository(settings: Settings) -> VendorRepository:
    """Create the configured repository backend."""
    if settings.storage.backend == "airtable":
        return AirtableVendorRepository(settings)
    return InMemoryVendorRepository.from_seed_file(
        settings.storage.seed_path, default_service_radius=settings.discovery.default_service_radius_miles
    )
