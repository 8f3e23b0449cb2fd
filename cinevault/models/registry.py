"""Persisted regional-registry payloads and IMDb identifier mappings."""

from __future__ import annotations

import typing
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint, event
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from cinevault.db.base_class import Base
from cinevault.utils.datetime import ensure_tz_aware, utcnow

JSON_COMPATIBLE = JSON().with_variant(JSONB, "postgresql")


class ExternalRegistryEntry(Base):
    """Resolved payload from a regional source (MyDramaList or MyAnimeList)."""
    __tablename__ = "asian_external_registry"
    __table_args__ = (UniqueConstraint("source", "source_id", name="uq_registry_source_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)
    payload: Mapped[dict[str, typing.Any]] = mapped_column(JSON_COMPATIBLE, default=dict)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
    overridden_by: Mapped[str | None] = mapped_column(String(255))


class ImdbExternalMap(Base):
    """Maps a universal (IMDb) identifier to its entry in one regional source."""
    __tablename__ = "imdb_external_map"

    imdb_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    source: Mapped[str] = mapped_column(String(32), nullable=False)
    source_id: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


@event.listens_for(ExternalRegistryEntry, "load")
@event.listens_for(ExternalRegistryEntry, "refresh")
@event.listens_for(ImdbExternalMap, "load")
@event.listens_for(ImdbExternalMap, "refresh")
def _normalize_registry_timestamps(target: typing.Any, *_, **__) -> None:
    target.updated_at = ensure_tz_aware(target.updated_at)
