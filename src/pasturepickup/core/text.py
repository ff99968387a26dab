"""
Slug helpers.

Region slugs must be produced the same way everywhere (catalog lookups, path
enumeration, links built by callers) or lookups silently miss.
"""

from __future__ import annotations

import re

_WHITESPACE_RUN = re.compile(r"\s+")
_NOT_SLUG_CHAR = re.compile(r"[^a-z0-9\s]")


def slugify(name: str) -> str:
    """Lower-case `name` and replace each run of whitespace with a single hyphen."""
    return _WHITESPACE_RUN.sub("-", name.lower())


def location_slug(name: str) -> str:
    """Build the `/search/{slug}` segment for a free-text place name.

    Unlike `slugify`, punctuation is dropped first ("St. Louis, MO" -> "st-louis-mo").
    """
    cleaned = _NOT_SLUG_CHAR.sub("", name.lower())
    return _WHITESPACE_RUN.sub("-", cleaned.strip())


def location_name_from_slug(slug: str) -> str:
    """Recover a display name from a search location slug."""
    return slug.replace("-", " ")
