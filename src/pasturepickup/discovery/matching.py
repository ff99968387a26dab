"""
Service matching strategies.

`loose` reproduces the directory's long-standing behavior: a vendor offers a service if
any of its lower-cased labels *contains* the first word of the service's lower-cased
display name. It can over-match ("dead" matches every "Dead ..." label) and under-match
multi-word names, which is why the policy is pluggable rather than hard-coded.

`exact` requires a label equal to the display name (case-insensitive, trimmed).
"""

from __future__ import annotations

from typing import Callable, Literal

from pasturepickup.domain.models import Service, Vendor

ServiceMatcher = Callable[[Vendor, Service], bool]
MatchMode = Literal["loose", "exact"]


def loose_service_match(vendor: Vendor, service: Service) -> bool:
    words = service.display_name.lower().split(" ")
    search_term = words[0] if words else ""
    return any(search_term in label.lower() for label in vendor.service_types)


def exact_service_match(vendor: Vendor, service: Service) -> bool:
    wanted = service.display_name.strip().lower()
    return any(label.strip().lower() == wanted for label in vendor.service_types)


_MATCHERS: dict[str, ServiceMatcher] = {
    "loose": loose_service_match,
    "exact": exact_service_match,
}


def get_service_matcher(mode: MatchMode | str) -> ServiceMatcher:
    """Return the matcher for a configured mode name."""
    try:
        return _MATCHERS[mode]
    except KeyError:
        raise ValueError(f"Unknown service match mode '{mode}'.") from None
