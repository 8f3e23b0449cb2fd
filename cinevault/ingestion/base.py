"""Base connector primitives for external catalog sources."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

MOVIE = "movie"
SERIES = "series"

_TAG_RE = re.compile(r"<[^>]+>")


@dataclass(slots=True)
class RawCandidate:
    """One normalized search hit from one source, with the untouched payload for audit."""
    source: str
    title: str
    media_type: str = MOVIE
    year: str | None = None
    source_id: str | None = None
    imdb_id: str | None = None
    tmdb_id: str | None = None
    plot: str | None = None
    poster: str | None = None
    popularity: float | None = None
    votes: Any = None
    raw: dict[str, Any] = field(default_factory=dict)


class BaseConnector:
    """Connector interface for external catalog sources.

    Subclasses declare which media types they can search and translate each raw
    hit into a ``RawCandidate``. Network calls go through ``fetch_json`` so a
    failing source yields ``None`` rather than an exception.
    """
    source_name: str
    search_types: tuple[str, ...] = (MOVIE, SERIES)

    def is_configured(self) -> bool:
        """Return False when required credentials are missing."""
        return True

    def supports(self, media_type: str) -> bool:
        return media_type in self.search_types

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        """Return raw hits for a query, or ``None`` when the source is unavailable."""
        raise NotImplementedError

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        """Normalize one raw hit into a ``RawCandidate``."""
        raise NotImplementedError


def strip_html(value: Any) -> str | None:
    if not value or not isinstance(value, str):
        return None
    return _TAG_RE.sub("", value).strip() or None


def clean_str(value: Any) -> str | None:
    """Return a stripped string, treating ``"N/A"`` placeholders as missing."""
    if value is None:
        return None
    text = str(value).strip()
    if not text or text.upper() == "N/A":
        return None
    return text


def as_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)
