"""
Async HTTP helpers for snapshot documents.

Every call is bounded by a timeout and maps transport, status and decode
failures onto the resource error taxonomy, so callers only ever handle
``ResourceUnavailableError`` (content) or ``MetadataUnavailableError``
(freshness probes). No automatic retries are performed: the user
re-triggers a load by re-selecting a period.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Any

import httpx

from statboard.core.snapshots.exceptions import (
    MetadataUnavailableError,
    ResourceUnavailableError,
)
from statboard.core.snapshots.freshness import parse_last_modified

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


def classify_http_error(status_code: int) -> str:
    """
    Classify an HTTP error status code.

    Args:
        status_code: HTTP status code

    Returns:
        Error type string (auth, not_found, rate_limit, validation, server, unknown)
    """
    if status_code == 401 or status_code == 403:
        return "auth"
    elif status_code == 404:
        return "not_found"
    elif status_code == 429:
        return "rate_limit"
    elif 400 <= status_code < 500:
        return "validation"
    elif 500 <= status_code < 600:
        return "server"
    else:
        return "unknown"


async def _send(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    timeout: float,
) -> httpx.Response:
    response = await asyncio.wait_for(client.request(method, url), timeout=timeout)
    response.raise_for_status()
    return response


async def fetch_json(
    client: httpx.AsyncClient,
    kind: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> Any:
    """
    GET a snapshot document and decode its JSON body.

    Args:
        client: Shared async client
        kind: Resource kind value, for error reporting
        url: Snapshot URL
        timeout: Upper bound on the whole request in seconds

    Returns:
        Decoded JSON document

    Raises:
        ResourceUnavailableError: On timeout, non-2xx status, network error,
            or a body that is not JSON
    """
    try:
        response = await _send(client, "GET", url, timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise ResourceUnavailableError(
            kind, f"Request timed out after {timeout}s", url=url, error_type="timeout"
        ) from e
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        raise ResourceUnavailableError(
            kind,
            f"HTTP {status_code}",
            url=url,
            status_code=status_code,
            error_type=classify_http_error(status_code),
        ) from e
    except httpx.RequestError as e:
        raise ResourceUnavailableError(
            kind, f"Network error: {e}", url=url, error_type="network"
        ) from e

    try:
        return response.json()
    except ValueError as e:
        raise ResourceUnavailableError(
            kind, "Response body is not valid JSON", url=url, error_type="parse"
        ) from e


async def probe_last_modified(
    client: httpx.AsyncClient,
    kind: str,
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
) -> datetime | None:
    """
    HEAD a snapshot and read its Last-Modified header.

    A missing or unparsable header is a valid outcome and yields None.

    Raises:
        MetadataUnavailableError: On timeout, non-2xx status or network error
    """
    try:
        response = await _send(client, "HEAD", url, timeout)
    except (asyncio.TimeoutError, httpx.TimeoutException) as e:
        raise MetadataUnavailableError(
            kind, f"Probe timed out after {timeout}s", url=url, error_type="timeout"
        ) from e
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        raise MetadataUnavailableError(
            kind,
            f"HTTP {status_code}",
            url=url,
            status_code=status_code,
            error_type=classify_http_error(status_code),
        ) from e
    except httpx.RequestError as e:
        raise MetadataUnavailableError(
            kind, f"Network error: {e}", url=url, error_type="network"
        ) from e

    return parse_last_modified(response.headers.get("last-modified"))


__all__ = [
    "DEFAULT_TIMEOUT",
    "classify_http_error",
    "fetch_json",
    "probe_last_modified",
]
