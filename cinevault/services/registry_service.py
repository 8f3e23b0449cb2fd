"""Persistent registry of regional-source payloads and IMDb mappings.

Each operation opens its own session from the injected factory so the store
can be shared by the process-wide service container.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from cinevault.models.registry import ExternalRegistryEntry, ImdbExternalMap
from cinevault.utils.datetime import utcnow

logger = logging.getLogger("cinevault.services.registry")

PRIVILEGED_OVERRIDE = "admin"


@dataclass(slots=True)
class RegistryMapping:
    imdb_id: str
    source: str
    source_id: str


class RegistryStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_mapping(self, imdb_id: str) -> RegistryMapping | None:
        async with self._session_factory() as session:
            row = await session.get(ImdbExternalMap, imdb_id)
            if row is None:
                return None
            return RegistryMapping(imdb_id=row.imdb_id, source=row.source, source_id=row.source_id)

    async def get_payload(self, source: str, source_id: Any) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(ExternalRegistryEntry).where(
                    ExternalRegistryEntry.source == source,
                    ExternalRegistryEntry.source_id == str(source_id),
                )
            )
            entry = result.scalar_one_or_none()
            return dict(entry.payload or {}) if entry else None

    async def save_resolution(
        self,
        *,
        imdb_id: str,
        source: str,
        source_id: Any,
        payload: dict[str, Any],
        overridden_by: str = PRIVILEGED_OVERRIDE,
    ) -> None:
        """Upsert the resolved payload and the IMDb mapping in one transaction."""
        source_key = str(source_id)
        now = utcnow()
        async with self._session_factory() as session:
            result = await session.execute(
                select(ExternalRegistryEntry).where(
                    ExternalRegistryEntry.source == source,
                    ExternalRegistryEntry.source_id == source_key,
                )
            )
            entry = result.scalar_one_or_none()
            if entry is None:
                entry = ExternalRegistryEntry(source=source, source_id=source_key)
                session.add(entry)
            entry.payload = payload
            entry.updated_at = now
            entry.overridden_by = overridden_by

            mapping = await session.get(ImdbExternalMap, imdb_id)
            if mapping is None:
                mapping = ImdbExternalMap(imdb_id=imdb_id)
                session.add(mapping)
            mapping.source = source
            mapping.source_id = source_key
            mapping.updated_at = now

            await session.commit()
        logger.info("Registry entry %s:%s mapped to %s", source, source_key, imdb_id)
