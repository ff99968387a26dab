"""
Error taxonomy.

- Not-found: unresolvable slugs or ids. Callers render their own not-found response.
- Validation: a submission that cannot be accepted. Carries the offending field.
- Upstream: the repository or the geocoder failed. Never retried by the core.
"""

from __future__ import annotations


class NotFoundError(LookupError):
    """A slug or id did not resolve to a catalog entry or record."""

    def __init__(self, kind: str, identifier: str):
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class SubmissionValidationError(ValueError):
    """A vendor submission was rejected before reaching the repository."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


class SubmissionStateError(ValueError):
    """An admin transition was requested on a submission that is no longer Pending."""


class RepositoryError(RuntimeError):
    """The vendor repository returned something we cannot use."""


class GeocodingError(RuntimeError):
    """The geocoding service refused or failed the request."""


class MapProviderError(RuntimeError):
    """The map provider could not be initialized."""
