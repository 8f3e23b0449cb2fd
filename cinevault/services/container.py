"""Process-wide service graph: one cache, one monitor, one set of connectors."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinevault.core.config import settings
from cinevault.ingestion import build_connectors
from cinevault.ingestion.base import BaseConnector
from cinevault.ingestion.observability import SourceMonitor
from cinevault.schema.record import CanonicalRecord
from cinevault.services.cache_store import CacheStore
from cinevault.services.enrichment_service import EnrichmentService
from cinevault.services.reconcile_service import MergedResult
from cinevault.services.registry_service import RegistryStore
from cinevault.services.search_service import SearchService


@dataclass
class CoreServices:
    connectors: Mapping[str, BaseConnector]
    cache: CacheStore
    monitor: SourceMonitor
    registry: RegistryStore | None = None
    searcher: SearchService = field(init=False)
    enricher: EnrichmentService = field(init=False)

    def __post_init__(self) -> None:
        self.searcher = SearchService(self.connectors, self.cache, self.monitor)
        self.enricher = EnrichmentService(self.connectors, self.registry)

    @classmethod
    def from_settings(cls, session_factory: async_sessionmaker[AsyncSession] | None = None) -> "CoreServices":
        return cls(
            connectors=build_connectors(),
            cache=CacheStore.from_settings(),
            monitor=SourceMonitor(
                circuit_threshold=settings.source_circuit_threshold,
                base_backoff_seconds=settings.source_circuit_backoff_seconds,
            ),
            registry=RegistryStore(session_factory) if session_factory is not None else None,
        )

    async def search(self, query: str | None, media_type: Any = "all", year: Any = None) -> list[MergedResult]:
        return await self.searcher.search(query, media_type, year)

    async def enrich(self, record: CanonicalRecord, *, is_privileged: bool = False) -> CanonicalRecord:
        return await self.enricher.enrich(record, is_privileged=is_privileged)

    def cache_stats(self) -> dict[str, int]:
        return self.cache.stats()
