"""Ordered, individually fault-tolerant enrichment of one identified title.

Invariants:
- ``enrich`` never raises for stage failures and never mutates its input; it
  returns a new record, unchanged apart from ``enriched`` when nothing applies.
- Stage contributions are shallow-merged into ``meta`` in stage order, later
  stages winning; the ``tmdb`` bag merges into the record's ``tmdb`` field.
- Only privileged callers write resolved regional payloads back to the registry.

Implementation notes:
- Each stage yields a ``StageOutcome`` (contribution, nothing, or an error)
  and the fold over outcomes is explicit in ``enrich``.
"""

from __future__ import annotations

import asyncio
import copy
import logging
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

from cinevault.ingestion.base import BaseConnector
from cinevault.ingestion.jikan import JikanConnector
from cinevault.ingestion.mdl import MDLConnector
from cinevault.ingestion.tmdb import PROFILE_SIZE, TMDBConnector, image_url
from cinevault.ingestion.tvmaze import TVMazeConnector
from cinevault.schema.record import CanonicalRecord
from cinevault.services.region_service import DEFAULT_REGION_WEIGHTS, RegionWeights, classify_record
from cinevault.services.registry_service import RegistryStore

logger = logging.getLogger("cinevault.services.enrichment")

MAL = "mal"
MDL = "mdl"

ANIME_CONFIDENCE = 0.9
TVMAZE_CONFIDENCE = 0.95
TMDB_CONFIDENCE = 0.95

_ANIMATION_RE = re.compile(r"animation", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class StageOutcome:
    stage: str
    contribution: dict[str, Any] | None = None
    error: str | None = None

    @classmethod
    def failed(cls, stage: str, error: str) -> "StageOutcome":
        return cls(stage=stage, error=error)

    @property
    def contributed(self) -> bool:
        return self.error is None and bool(self.contribution)


@dataclass(frozen=True, slots=True)
class EnrichmentContext:
    is_series: bool
    is_animation: bool
    is_asian: bool


def classify_for_enrichment(
    record: CanonicalRecord, weights: RegionWeights = DEFAULT_REGION_WEIGHTS
) -> EnrichmentContext:
    return EnrichmentContext(
        is_series=record.is_series,
        is_animation=bool(_ANIMATION_RE.search(record.genre or "")),
        is_asian=classify_record(record, weights=weights),
    )


async def _settle(*calls: Awaitable[Any]) -> list[Any]:
    """Await every call; failures come back as ``None`` after a warning."""
    results = await asyncio.gather(*calls, return_exceptions=True)
    settled = []
    for result in results:
        if isinstance(result, Exception):
            logger.warning("Enrichment call failed: %s", result)
            settled.append(None)
        else:
            settled.append(result)
    return settled


def normalize_cast(cast: list[Any]) -> list[dict[str, Any]]:
    """Portrait-bearing cast rows built from catalog credits."""
    normalized = []
    for member in cast:
        if not isinstance(member, dict):
            continue
        normalized.append(
            {
                "name": member.get("name"),
                "character": member.get("character"),
                "order": member.get("order"),
                "photo": image_url(member.get("profile_path"), PROFILE_SIZE),
            }
        )
    return normalized


class EnrichmentService:
    def __init__(
        self,
        connectors: Mapping[str, BaseConnector],
        registry: RegistryStore | None = None,
        *,
        region_weights: RegionWeights = DEFAULT_REGION_WEIGHTS,
    ) -> None:
        self.connectors = connectors
        self.registry = registry
        self.region_weights = region_weights

    @property
    def tmdb(self) -> TMDBConnector:
        return self.connectors["tmdb"]  # type: ignore[return-value]

    @property
    def tvmaze(self) -> TVMazeConnector:
        return self.connectors["tvmaze"]  # type: ignore[return-value]

    @property
    def jikan(self) -> JikanConnector:
        return self.connectors["jikan"]  # type: ignore[return-value]

    @property
    def mdl(self) -> MDLConnector:
        return self.connectors["mdl"]  # type: ignore[return-value]

    async def resolve_registry(
        self,
        imdb_id: str | None,
        title: str | None,
        preferred_source: str,
        *,
        is_privileged: bool = False,
    ) -> dict[str, Any] | None:
        """Cached registry payload for a title, else a live resolution.

        A stored mapping pointing at ``preferred_source`` short-circuits to the
        stored payload. Otherwise the source is queried live and, for
        privileged callers only, the result and mapping are persisted.
        """
        if not imdb_id or not title:
            return None

        cached = await self._cached_payload(imdb_id, preferred_source)
        if cached is not None:
            return {**cached, "_registry_source": "cache"}

        resolved = await self._resolve_externally(title, preferred_source)
        if resolved is None:
            return None
        source_id, payload = resolved

        if is_privileged and self.registry is not None:
            try:
                await self.registry.save_resolution(
                    imdb_id=imdb_id, source=preferred_source, source_id=source_id, payload=payload
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning("Registry persist failed for %s: %s", imdb_id, exc)

        return {**payload, "_registry_source": "api"}

    async def _cached_payload(self, imdb_id: str, preferred_source: str) -> dict[str, Any] | None:
        if self.registry is None:
            return None
        try:
            mapping = await self.registry.get_mapping(imdb_id)
            if mapping is None or mapping.source != preferred_source:
                return None
            return await self.registry.get_payload(mapping.source, mapping.source_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Registry lookup failed for %s: %s", imdb_id, exc)
            return None

    async def _resolve_externally(self, title: str, source: str) -> tuple[Any, dict[str, Any]] | None:
        if source == MDL:
            if not self.mdl.is_configured():
                return None
            hits = await self.mdl.search(title, "series")
            found = hits[0] if hits else None
            if not isinstance(found, dict) or found.get("id") is None:
                return None
            detail = await self.mdl.title_detail(found["id"])
            if not detail:
                return None
            return found["id"], detail
        if source == MAL:
            hits = await self.jikan.search_anime(title, limit=1)
            anime = hits[0] if hits else None
            if not isinstance(anime, dict):
                return None
            return anime.get("mal_id"), anime
        return None

    async def anime_stage(
        self, record: CanonicalRecord, ctx: EnrichmentContext, is_privileged: bool
    ) -> dict[str, Any] | None:
        if not ctx.is_animation or record.meta.get("anime"):
            return None
        anime = await self.resolve_registry(record.imdb_id, record.title, MAL, is_privileged=is_privileged)
        if not anime:
            return None
        studios = [studio.get("name") for studio in anime.get("studios") or [] if isinstance(studio, dict)]
        return {
            "anime": {
                "malId": anime.get("mal_id"),
                "score": anime.get("score"),
                "studios": studios,
                "confidence": ANIME_CONFIDENCE,
            }
        }

    async def tvmaze_stage(self, record: CanonicalRecord, ctx: EnrichmentContext) -> dict[str, Any] | None:
        if not ctx.is_series or record.meta.get("tvmaze") or not record.imdb_id:
            return None
        show = await self.tvmaze.lookup_by_imdb(record.imdb_id)
        if not show or show.get("id") is None:
            return None
        episodes, cast = await _settle(self.tvmaze.episodes(show["id"]), self.tvmaze.cast(show["id"]))
        return {
            "tvmaze": {
                "id": show["id"],
                "episodes": episodes,
                "cast": cast,
                "confidence": TVMAZE_CONFIDENCE,
            }
        }

    async def regional_stage(
        self, record: CanonicalRecord, ctx: EnrichmentContext, is_privileged: bool
    ) -> dict[str, Any] | None:
        if not ctx.is_asian:
            return None
        payload = await self.resolve_registry(record.imdb_id, record.title, MDL, is_privileged=is_privileged)
        return {"regional": payload} if payload else None

    async def catalog_stage(self, record: CanonicalRecord, ctx: EnrichmentContext) -> dict[str, Any] | None:
        if not self.tmdb.is_configured():
            return None
        media_type = "series" if ctx.is_series else "movie"
        tmdb_id = record.tmdb.get("id")
        if not tmdb_id and record.imdb_id:
            tmdb_id = await self.tmdb.find_by_imdb(record.imdb_id, media_type)
        if not tmdb_id:
            return None

        calls = [self.tmdb.credits(tmdb_id, media_type), self.tmdb.images(tmdb_id, media_type)]
        if ctx.is_series:
            calls.append(self.tmdb.series_details(tmdb_id))
        credits, images, *rest = await _settle(*calls)
        details = rest[0] if rest else None

        credits = credits or {}
        crew = credits.get("crew") or []
        return {
            "tmdb": {
                "id": tmdb_id,
                "cast": credits.get("cast") or [],
                "director": [
                    member.get("name")
                    for member in crew
                    if isinstance(member, dict) and member.get("job") == "Director"
                ],
                "seasons": (details or {}).get("seasons") or None,
                "credits": {"images": {"backdrops": (images or {}).get("backdrops") or []}},
                "confidence": TMDB_CONFIDENCE,
            }
        }

    def _stages(
        self, record: CanonicalRecord, ctx: EnrichmentContext, is_privileged: bool
    ) -> list[tuple[str, Callable[[], Awaitable[dict[str, Any] | None]]]]:
        return [
            ("anime", lambda: self.anime_stage(record, ctx, is_privileged)),
            ("tvmaze", lambda: self.tvmaze_stage(record, ctx)),
            ("regional", lambda: self.regional_stage(record, ctx, is_privileged)),
            ("tmdb", lambda: self.catalog_stage(record, ctx)),
        ]

    async def run_stage(
        self, name: str, stage: Callable[[], Awaitable[dict[str, Any] | None]]
    ) -> StageOutcome:
        try:
            contribution = await stage()
        except Exception as exc:  # noqa: BLE001
            return StageOutcome.failed(name, str(exc) or exc.__class__.__name__)
        return StageOutcome(stage=name, contribution=contribution or None)

    async def enrich(self, record: CanonicalRecord, *, is_privileged: bool = False) -> CanonicalRecord:
        ctx = classify_for_enrichment(record, self.region_weights)
        meta = copy.deepcopy(record.meta)
        tmdb_data = copy.deepcopy(record.tmdb)
        provenance: list[str] = []

        for name, stage in self._stages(record, ctx, is_privileged):
            outcome = await self.run_stage(name, stage)
            if outcome.error is not None:
                logger.warning("Enrichment stage %s failed for %s: %s", name, record.imdb_id, outcome.error)
                continue
            if not outcome.contributed:
                continue
            contribution = dict(outcome.contribution or {})
            catalog = contribution.pop("tmdb", None)
            if catalog:
                tmdb_data.update(catalog)
                provenance.append("tmdb")
            meta.update(contribution)
            provenance.extend(contribution.keys())

        if isinstance(tmdb_data.get("cast"), list):
            meta["cast"] = normalize_cast(tmdb_data["cast"])

        return record.model_copy(
            update={"meta": meta, "tmdb": tmdb_data, "enrichment_sources": provenance, "enriched": True}
        )
