"""
HTTP helpers.

Centralizes the minimal HTTP client logic used by the Airtable repository and the
geocoder.

Design goals:
- Small surface area (GET / POST / PATCH JSON).
- Deterministic defaults (timeout + User-Agent).
- Raise on non-2xx so callers decide how to fail (the discovery core never retries).
"""

from __future__ import annotations

from typing import Any

import httpx


DEFAULT_USER_AGENT = "pasturepickup/0.1.0 (+https://pasturepickup.com)"


def _headers(extra: dict[str, str] | None) -> dict[str, str]:
    headers = {"User-Agent": DEFAULT_USER_AGENT}
    if extra:
        headers.update(extra)
    return headers


def get_json(
    url: str,
    *,
    params: dict[str, Any] | list[tuple[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """GET `url` and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
        ValueError: If the response body is not valid JSON.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.get(url, params=params, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()


def post_json(
    url: str,
    *,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """POST `payload` as a JSON body and return the decoded JSON response.

    Raises:
        httpx.HTTPError: On transport errors or non-2xx status codes.
    """
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.post(url, json=payload, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()


def patch_json(
    url: str,
    *,
    payload: Any,
    headers: dict[str, str] | None = None,
    timeout_seconds: float = 15,
) -> Any:
    """PATCH `payload` as a JSON body and return the decoded JSON response."""
    with httpx.Client(timeout=timeout_seconds) as client:
        resp = client.patch(url, json=payload, headers=_headers(headers))
        resp.raise_for_status()
        return resp.json()
