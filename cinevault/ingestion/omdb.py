from __future__ import annotations

from typing import Any

from cinevault.core.config import settings
from cinevault.ingestion.base import MOVIE, SERIES, BaseConnector, RawCandidate, clean_str
from cinevault.ingestion.http import fetch_json

API_BASE = "https://www.omdbapi.com/"


class OMDbConnector(BaseConnector):
    """Keyword movie/series search keyed by IMDb identifiers."""
    source_name = "omdb"

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.omdb_api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        if not self.is_configured():
            return None
        params: dict[str, Any] = {
            "apikey": self.api_key,
            "s": query,
            "type": SERIES if media_type == SERIES else MOVIE,
        }
        if year:
            params["y"] = year
        payload = await fetch_json(API_BASE, params=params)
        if payload is None:
            return None
        # A "Response": "False" payload simply has no Search list.
        return list(payload.get("Search") or [])

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        imdb_id = clean_str(raw.get("imdbID"))
        return RawCandidate(
            source=self.source_name,
            title=clean_str(raw.get("Title")) or "",
            media_type=SERIES if raw.get("Type") == "series" else MOVIE,
            year=clean_str(raw.get("Year")),
            source_id=imdb_id,
            imdb_id=imdb_id,
            plot=clean_str(raw.get("Plot")),
            poster=clean_str(raw.get("Poster")),
            votes=raw.get("imdbVotes"),
            raw=raw,
        )
