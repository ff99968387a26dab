"""
Offline vendor data quality report.

Goal: show which vendor rows silently drop out of discovery and why, without touching
the network. Discovery never fails on a malformed row; this report is where those rows
become visible.
Used by:
- CLI debugging (`pasturepickup quality-report`)
- admin API status endpoint
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from pasturepickup.catalog.locations import LocationCatalog
from pasturepickup.domain.models import Vendor


@dataclass(frozen=True)
class Issue:
    severity: str  # "info" | "warning" | "error"
    code: str
    message: str
    count: int = 1
    sample: list[str] | None = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "severity": self.severity,
            "code": self.code,
            "message": self.message,
            "count": int(self.count),
            "sample": list(self.sample or []),
        }


def _label(v: Vendor) -> str:
    return f"{v.id} ({v.name})" if v.name else v.id


def vendor_issues(vendors: Iterable[Vendor], catalog: LocationCatalog) -> list[Issue]:
    vendors = list(vendors)
    issues: list[Issue] = []

    counts = Counter(v.id for v in vendors)
    dup = sorted(i for i, n in counts.items() if n > 1)
    if dup:
        issues.append(
            Issue(severity="error", code="DUPLICATE_VENDOR_ID", message="Duplicate vendor ids.", count=len(dup), sample=dup[:8])
        )

    checks: list[tuple[str, str, str, list[Vendor]]] = [
        (
            "warning",
            "MISSING_COORDINATES",
            "Vendors without valid coordinates are excluded from radius search and the map.",
            [v for v in vendors if not v.has_coordinates],
        ),
        (
            "warning",
            "UNKNOWN_STATE_CODE",
            "Vendors whose state code is not in the catalog never appear on region pages.",
            [v for v in vendors if catalog.state_by_code(v.state_code) is None],
        ),
        (
            "warning",
            "EMPTY_SERVICE_TYPES",
            "Vendors without service labels never match a service page.",
            [v for v in vendors if not v.service_types],
        ),
    ]

    off_seed: list[Vendor] = []
    for v in vendors:
        state = catalog.state_by_code(v.state_code)
        if state is None:
            continue
        if v.city.strip().lower() not in {c.lower() for c in state.major_cities}:
            off_seed.append(v)
    checks.append(
        (
            "info",
            "CITY_NOT_IN_CATALOG",
            "Vendors outside the catalog's major cities only appear on state pages and as 'nearby'.",
            off_seed,
        )
    )

    for severity, code, message, rows in checks:
        if rows:
            issues.append(
                Issue(
                    severity=severity,
                    code=code,
                    message=message,
                    count=len(rows),
                    sample=[_label(v) for v in rows[:8]],
                )
            )
    return issues


def build_quality_report(vendors: Iterable[Vendor], catalog: LocationCatalog) -> dict[str, Any]:
    vendors = list(vendors)
    issues = vendor_issues(vendors, catalog)
    status_counts = Counter(v.status for v in vendors)
    return {
        "vendor_count": len(vendors),
        "status_counts": dict(sorted(status_counts.items())),
        "with_coordinates": sum(1 for v in vendors if v.has_coordinates),
        "ok": not any(i.severity == "error" for i in issues),
        "issues": [i.as_dict() for i in issues],
    }
