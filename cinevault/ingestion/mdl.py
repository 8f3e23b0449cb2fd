from __future__ import annotations

from typing import Any

from cinevault.core.config import settings
from cinevault.ingestion.base import SERIES, BaseConnector, RawCandidate, clean_str
from cinevault.ingestion.http import build_proxy_headers, fetch_json
from cinevault.utils.datetime import year_prefix


class MDLConnector(BaseConnector):
    """Regional-drama registry (MyDramaList) reached through the keyed API proxy."""
    source_name = "mdl"
    search_types = (SERIES,)

    def __init__(self, api_key: str | None = None, host: str | None = None) -> None:
        self.api_key = api_key if api_key is not None else settings.rapidapi_key
        self.host = host or settings.mdl_api_host

    @property
    def base_url(self) -> str:
        return f"https://{self.host}"

    def is_configured(self) -> bool:
        return bool(self.api_key and self.host)

    def _headers(self) -> dict[str, str]:
        return build_proxy_headers(self.api_key, self.host)

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        if not self.is_configured():
            return None
        payload = await fetch_json(f"{self.base_url}/search/title", params={"q": query}, headers=self._headers())
        if payload is None:
            return None
        return list(payload.get("results") or [])

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        drama_id = raw.get("id")
        year = raw.get("year")
        return RawCandidate(
            source=self.source_name,
            title=clean_str(raw.get("title") or raw.get("name")) or "",
            media_type=SERIES,
            year=str(year) if year else year_prefix(raw.get("release_date")),
            source_id=str(drama_id) if drama_id is not None else None,
            plot=clean_str(raw.get("synopsis") or raw.get("overview")),
            poster=raw.get("poster") or raw.get("thumb"),
            raw=raw,
        )

    async def title_detail(self, drama_id: Any) -> dict[str, Any] | None:
        if not self.is_configured():
            return None
        return await fetch_json(f"{self.base_url}/title/{drama_id}", headers=self._headers())
