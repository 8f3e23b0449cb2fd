"""Scrub source credentials out of anything headed for the logs.

Catalog keys travel as query parameters (TMDB ``api_key``, OMDb ``apikey``),
as proxy headers (``X-RapidAPI-Key``) or inside connection URLs (Redis
userinfo). Each form has its own pattern below.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

MASK = "***"

SECRET_PARAMS = frozenset({"api_key", "apikey", "token", "access_token", "secret", "password"})

_REDACTIONS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"([a-z][a-z0-9+.-]*://)([^@/\s]+)@", re.IGNORECASE), rf"\1{MASK}@"),
    (
        re.compile(r"(?i)\b(api_key|apikey|token|access_token|refresh_token|secret|password)=([^&\s]+)"),
        rf"\1={MASK}",
    ),
    (re.compile(r"(?i)(x-rapidapi-key['\"]?\s*[:=]\s*['\"]?)([^'\"\s,}]+)"), rf"\1{MASK}"),
    (re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._~-]+)"), rf"\1{MASK}"),
)


def redact_secrets(text: str) -> str:
    """Mask URL credentials, keyed query parameters, proxy keys and bearer tokens."""
    if not text:
        return text
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def redact_params(params: Mapping[str, Any] | None) -> dict[str, Any]:
    """Copy of request parameters with credential values masked."""
    return {key: (MASK if key.lower() in SECRET_PARAMS else value) for key, value in (params or {}).items()}
