from __future__ import annotations

from typing import Any

from cinevault.core.config import settings
from cinevault.ingestion.base import MOVIE, SERIES, BaseConnector, RawCandidate, as_number, clean_str
from cinevault.ingestion.http import fetch_json
from cinevault.utils.datetime import year_prefix

API_BASE = "https://api.themoviedb.org/3"
IMAGE_BASE = "https://image.tmdb.org/t/p"
POSTER_SIZE = "w500"
PROFILE_SIZE = "w185"


def image_url(path: str | None, size: str = POSTER_SIZE) -> str | None:
    if not path:
        return None
    return f"{IMAGE_BASE}/{size}{path}"


class TMDBConnector(BaseConnector):
    """General catalog: search, find-by-IMDb-id, credits, season details and images."""
    source_name = "tmdb"

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.tmdb_api_key

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _params(self, **extra: Any) -> dict[str, Any]:
        return {"api_key": self.api_key, **{k: v for k, v in extra.items() if v is not None}}

    @staticmethod
    def _kind(media_type: str) -> str:
        return "tv" if media_type == SERIES else "movie"

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        if not self.is_configured():
            return None
        kind = self._kind(media_type)
        year_param = {"first_air_date_year": year} if kind == "tv" else {"year": year}
        payload = await fetch_json(f"{API_BASE}/search/{kind}", params=self._params(query=query, **year_param))
        if payload is None:
            return None
        return list(payload.get("results") or [])

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        is_series = raw.get("media_type") == "tv" or bool(raw.get("first_air_date"))
        tmdb_id = raw.get("id")
        return RawCandidate(
            source=self.source_name,
            title=clean_str(raw.get("title") or raw.get("name")) or "",
            media_type=SERIES if is_series else MOVIE,
            year=year_prefix(raw.get("release_date")) or year_prefix(raw.get("first_air_date")),
            source_id=str(tmdb_id) if tmdb_id is not None else None,
            tmdb_id=str(tmdb_id) if tmdb_id is not None else None,
            plot=clean_str(raw.get("overview")),
            poster=image_url(raw.get("poster_path")),
            popularity=as_number(raw.get("popularity")),
            votes=raw.get("vote_count"),
            raw=raw,
        )

    async def find_by_imdb(self, imdb_id: str, media_type: str) -> str | None:
        """Resolve a TMDB id from an IMDb id via the find endpoint."""
        if not self.is_configured() or not imdb_id:
            return None
        payload = await fetch_json(
            f"{API_BASE}/find/{imdb_id}", params=self._params(external_source="imdb_id")
        )
        if not payload:
            return None
        bucket = payload.get("tv_results" if media_type == SERIES else "movie_results") or []
        if not bucket:
            return None
        match_id = bucket[0].get("id")
        return str(match_id) if match_id is not None else None

    async def credits(self, tmdb_id: str, media_type: str) -> dict[str, Any] | None:
        return await fetch_json(f"{API_BASE}/{self._kind(media_type)}/{tmdb_id}/credits", params=self._params())

    async def series_details(self, tmdb_id: str) -> dict[str, Any] | None:
        return await fetch_json(f"{API_BASE}/tv/{tmdb_id}", params=self._params())

    async def images(self, tmdb_id: str, media_type: str) -> dict[str, Any] | None:
        return await fetch_json(f"{API_BASE}/{self._kind(media_type)}/{tmdb_id}/images", params=self._params())
