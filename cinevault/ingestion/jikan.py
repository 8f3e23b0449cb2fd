from __future__ import annotations

from typing import Any

from cinevault.ingestion.base import SERIES, BaseConnector, RawCandidate, clean_str
from cinevault.ingestion.http import fetch_json
from cinevault.utils.datetime import year_prefix

API_BASE = "https://api.jikan.moe/v4"
SEARCH_LIMIT = 5


class JikanConnector(BaseConnector):
    """Anime registry (MyAnimeList via Jikan); keyword search only."""
    source_name = "jikan"
    search_types = (SERIES,)

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        return await self.search_anime(query, limit=SEARCH_LIMIT)

    async def search_anime(self, query: str, *, limit: int = SEARCH_LIMIT) -> list[dict[str, Any]] | None:
        payload = await fetch_json(f"{API_BASE}/anime", params={"q": query, "limit": limit})
        if payload is None:
            return None
        return list(payload.get("data") or [])

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        images = (raw.get("images") or {}).get("jpg") or {}
        aired = raw.get("aired") or {}
        mal_id = raw.get("mal_id")
        year = raw.get("year")
        return RawCandidate(
            source=self.source_name,
            title=clean_str(raw.get("title_english") or raw.get("title")) or "",
            media_type=SERIES,
            year=str(year) if year else year_prefix(aired.get("from")),
            source_id=str(mal_id) if mal_id is not None else None,
            plot=clean_str(raw.get("synopsis")),
            poster=images.get("large_image_url") or images.get("image_url"),
            # Jikan's "popularity" is a rank (lower is better); member count is the vote-like signal.
            votes=raw.get("members"),
            raw=raw,
        )
