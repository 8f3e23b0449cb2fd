"""Bounded-retry JSON fetch used by every outbound source call.

Invariants:
- ``fetch_json`` never raises; failures degrade to ``None`` with a warning log.
- Worst-case latency per call is ``timeout_seconds * (retries + 1)``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_none

from cinevault.core.config import settings
from cinevault.utils.redaction import redact_params, redact_secrets

logger = logging.getLogger("cinevault.ingestion.http")

RETRYABLE_ERRORS = (httpx.HTTPError, asyncio.TimeoutError, ValueError)


class ExternalAPIError(Exception):
    pass


async def _request_json(
    url: str,
    *,
    method: str,
    headers: dict[str, str] | None,
    params: dict[str, Any] | None,
    timeout_seconds: float,
) -> Any:
    async with httpx.AsyncClient(timeout=timeout_seconds) as client:
        response = await asyncio.wait_for(
            client.request(method, url, headers=headers, params=params),
            timeout=timeout_seconds,
        )
        if response.status_code >= 400:
            raise ExternalAPIError(f"HTTP {response.status_code}")
        return response.json()


async def fetch_json(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    method: str = "GET",
    retries: int | None = None,
    timeout_seconds: float | None = None,
) -> Any | None:
    """Fetch and decode a JSON payload, returning ``None`` once retries are exhausted."""
    attempts = (settings.fetch_retries if retries is None else max(0, retries)) + 1
    timeout = settings.fetch_timeout_seconds if timeout_seconds is None else timeout_seconds
    try:
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(attempts),
            wait=wait_none(),
            retry=retry_if_exception_type((ExternalAPIError, *RETRYABLE_ERRORS)),
            reraise=True,
        ):
            with attempt:
                return await _request_json(
                    url, method=method, headers=headers, params=params, timeout_seconds=timeout
                )
    except Exception as exc:  # noqa: BLE001
        logger.warning(
            "Fetch failed after %s attempt(s): %s (%s)",
            attempts,
            redact_secrets(_describe(url, params)),
            redact_secrets(str(exc) or exc.__class__.__name__),
        )
    return None


def _describe(url: str, params: dict[str, Any] | None) -> str:
    if not params:
        return url
    query = "&".join(f"{key}={value}" for key, value in redact_params(params).items())
    return f"{url}?{query}"


def build_proxy_headers(api_key: str | None, host: str | None) -> dict[str, str]:
    """Headers for keyed sources reached through the generic API proxy."""
    if not api_key or not host:
        return {}
    return {"X-RapidAPI-Key": api_key, "X-RapidAPI-Host": host}
