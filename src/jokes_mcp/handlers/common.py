"""Shared helpers for upstream HTTP calls."""

from __future__ import annotations

from typing import Any

import httpx

from ..errors import UpstreamFailure

# icanhazdadjoke serves HTML unless JSON is requested
JSON_HEADERS = {"Accept": "application/json"}


async def fetch_json(
    http: httpx.AsyncClient, url: str, headers: dict[str, str] | None = None
) -> Any:
    """GET ``url`` and decode the JSON body.

    Raises:
        UpstreamFailure: Connection error, non-2xx status, or non-JSON body
    """
    try:
        response = await http.get(url, headers=headers or JSON_HEADERS)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise UpstreamFailure(
            f"{url} returned {e.response.status_code}",
            details={"url": url, "status": e.response.status_code},
        ) from e
    except httpx.HTTPError as e:
        raise UpstreamFailure(f"{url} unreachable: {e!r}", details={"url": url}) from e

    try:
        return response.json()
    except ValueError as e:
        raise UpstreamFailure(f"{url} returned invalid JSON", details={"url": url}) from e


def require_text(payload: Any, key: str, url: str) -> str:
    """Pull a non-empty string field out of a JSON object."""
    value = payload.get(key) if isinstance(payload, dict) else None
    if not isinstance(value, str) or not value:
        raise UpstreamFailure(f"{url} response missing '{key}'", details={"url": url})
    return value
