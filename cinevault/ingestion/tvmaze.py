from __future__ import annotations

from typing import Any

from cinevault.ingestion.base import SERIES, BaseConnector, RawCandidate, clean_str, strip_html
from cinevault.ingestion.http import fetch_json
from cinevault.utils.datetime import year_prefix

API_BASE = "https://api.tvmaze.com"


class TVMazeConnector(BaseConnector):
    """Episode-schedule service; needs no API key."""
    source_name = "tvmaze"
    search_types = (SERIES,)

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        payload = await fetch_json(f"{API_BASE}/search/shows", params={"q": query})
        if payload is None:
            return None
        return [hit.get("show") for hit in payload if isinstance(hit, dict) and hit.get("show")]

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        externals = raw.get("externals") or {}
        image = raw.get("image") or {}
        show_id = raw.get("id")
        return RawCandidate(
            source=self.source_name,
            title=clean_str(raw.get("name")) or "",
            media_type=SERIES,
            year=year_prefix(raw.get("premiered")),
            source_id=str(show_id) if show_id is not None else None,
            imdb_id=clean_str(externals.get("imdb")),
            plot=strip_html(raw.get("summary")),
            poster=image.get("original") or image.get("medium"),
            raw=raw,
        )

    async def lookup_by_imdb(self, imdb_id: str) -> dict[str, Any] | None:
        if not imdb_id:
            return None
        return await fetch_json(f"{API_BASE}/lookup/shows", params={"imdb": imdb_id})

    async def episodes(self, show_id: Any) -> list[dict[str, Any]] | None:
        return await fetch_json(f"{API_BASE}/shows/{show_id}/episodes")

    async def cast(self, show_id: Any) -> list[dict[str, Any]] | None:
        return await fetch_json(f"{API_BASE}/shows/{show_id}/cast")
