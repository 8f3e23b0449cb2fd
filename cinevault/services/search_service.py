"""Multi-source title search: fan out, normalize, score, reconcile, rank.

Invariants:
- A blank query returns ``[]`` without issuing any request.
- One source failing, timing out or sitting behind an open circuit only
  removes that source's candidates; every other request still settles.
- Results are ordered by ``confidence`` descending; equal confidences keep
  cluster order.

Implementation notes:
- Non-empty merged lists are cached under ``build_cache_key(type, query, year)``;
  a cache hit issues no outbound requests. Results missing a planned source
  (raised, returned no payload, or circuit open) are not cached.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from cinevault.ingestion.base import MOVIE, SERIES, BaseConnector, RawCandidate
from cinevault.ingestion.observability import CircuitOpenError, SourceMonitor
from cinevault.services.cache_store import CacheStore
from cinevault.services.reconcile_service import MergedResult, merge_best, reconcile
from cinevault.services.scoring_service import DEFAULT_WEIGHTS, ScoringWeights, score_candidate
from cinevault.utils.normalize import build_cache_key, normalize_type, normalize_year

logger = logging.getLogger("cinevault.services.search")

ALL_TYPES = "all"

# (source, media type) pairs issued per requested type, in candidate rank order.
REQUEST_PLAN: dict[str, tuple[tuple[str, str], ...]] = {
    MOVIE: (("tmdb", MOVIE), ("omdb", MOVIE)),
    SERIES: (
        ("tmdb", SERIES),
        ("tvmaze", SERIES),
        ("omdb", SERIES),
        ("jikan", SERIES),
        ("mdl", SERIES),
    ),
    ALL_TYPES: (
        ("tmdb", MOVIE),
        ("tmdb", SERIES),
        ("tvmaze", SERIES),
        ("omdb", MOVIE),
        ("omdb", SERIES),
        ("jikan", SERIES),
        ("mdl", SERIES),
    ),
}


def resolve_search_type(value: Any) -> str:
    """Map a caller type hint onto a request plan key; unknown hints search everything."""
    normalized = normalize_type(value)
    if normalized == "anime":
        return SERIES
    if normalized in (MOVIE, SERIES):
        return normalized
    return ALL_TYPES


class SearchService:
    def __init__(
        self,
        connectors: Mapping[str, BaseConnector],
        cache: CacheStore,
        monitor: SourceMonitor,
        *,
        weights: ScoringWeights = DEFAULT_WEIGHTS,
    ) -> None:
        self.connectors = connectors
        self.cache = cache
        self.monitor = monitor
        self.weights = weights

    def plan(self, search_type: str) -> list[tuple[BaseConnector, str]]:
        """Connectors to call for a search type, skipping sources without credentials."""
        planned: list[tuple[BaseConnector, str]] = []
        for source, media_type in REQUEST_PLAN[search_type]:
            connector = self.connectors.get(source)
            if connector is None or not connector.is_configured() or not connector.supports(media_type):
                continue
            planned.append((connector, media_type))
        return planned

    async def search(self, query: str | None, media_type: Any = ALL_TYPES, year: Any = None) -> list[MergedResult]:
        text = (query or "").strip()
        if not text:
            return []
        search_type = resolve_search_type(media_type)
        target_year = normalize_year(year) or None
        cache_key = build_cache_key(search_type, text, target_year)

        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            logger.debug("Search cache hit for %s", cache_key)
            return [MergedResult.from_dict(item) for item in cached if isinstance(item, dict)]

        candidates, complete = await self._collect(text, search_type, target_year)
        if not candidates:
            return []

        scored = [
            score_candidate(candidate, text, target_year, index, self.weights)
            for index, candidate in enumerate(candidates)
        ]
        merged = [merge_best(cluster) for cluster in reconcile(scored)]
        merged.sort(key=lambda result: result.confidence, reverse=True)

        if merged and complete:
            self.cache.set(cache_key, [result.to_dict() for result in merged])
        return merged

    async def _collect(self, query: str, search_type: str, year: str | None) -> tuple[list[RawCandidate], bool]:
        """Gather candidates; the flag is False when any planned source did not answer."""
        planned = []
        complete = True
        for connector, media_type in self.plan(search_type):
            context = {"query": query, "media_type": media_type}
            if not self.monitor.allow_call(connector.source_name):
                self.monitor.record_skip(connector.source_name, reason="circuit_open", context=context)
                complete = False
                continue
            planned.append((connector, media_type, context))

        outcomes = await asyncio.gather(
            *(
                self.monitor.track(
                    connector.source_name,
                    lambda connector=connector, media_type=media_type: connector.search(query, media_type, year),
                    context=context,
                )
                for connector, media_type, context in planned
            ),
            return_exceptions=True,
        )

        candidates: list[RawCandidate] = []
        for (connector, media_type, _), outcome in zip(planned, outcomes):
            if isinstance(outcome, CircuitOpenError):
                complete = False
                continue
            if isinstance(outcome, BaseException):
                logger.warning("Search source %s failed: %s", connector.source_name, outcome)
                complete = False
                continue
            if outcome is None:
                complete = False
                continue
            candidates.extend(self._normalize(connector, media_type, outcome))
        return candidates, complete

    def _normalize(self, connector: BaseConnector, media_type: str, hits: list[Any]) -> list[RawCandidate]:
        try:
            return [connector.to_candidate(hit, media_type) for hit in hits if isinstance(hit, dict)]
        except Exception as exc:  # noqa: BLE001
            logger.warning("Dropping %s results; unexpected payload shape: %s", connector.source_name, exc)
            return []
