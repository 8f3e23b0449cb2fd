"""User-submitted metadata suggestions awaiting moderation."""

from __future__ import annotations

import enum
import typing
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, String, Uuid, event
from sqlalchemy.orm import Mapped, mapped_column

from cinevault.db.base_class import Base
from cinevault.models.registry import JSON_COMPATIBLE
from cinevault.utils.datetime import ensure_tz_aware, utcnow


class SuggestionStatus(str, enum.Enum):
    """Moderation states for a content suggestion."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ContentSuggestion(Base):
    __tablename__ = "content_suggestions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    imdb_id: Mapped[str | None] = mapped_column(String(32), index=True)
    title: Mapped[str | None] = mapped_column(String(500))
    payload: Mapped[dict[str, typing.Any]] = mapped_column(JSON_COMPATIBLE, default=dict)
    submitted_by: Mapped[str | None] = mapped_column(String(255))
    # Persist the enum values (lowercase) rather than member names
    status: Mapped[SuggestionStatus] = mapped_column(
        Enum(SuggestionStatus, name="suggestion_status", values_callable=lambda enum_cls: [e.value for e in enum_cls]),
        nullable=False,
        default=SuggestionStatus.PENDING,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    reviewed_by: Mapped[str | None] = mapped_column(String(255))


@event.listens_for(ContentSuggestion, "load")
@event.listens_for(ContentSuggestion, "refresh")
def _normalize_suggestion_timestamps(target: ContentSuggestion, *_, **__) -> None:
    target.created_at = ensure_tz_aware(target.created_at)  # type: ignore[assignment]
    target.reviewed_at = ensure_tz_aware(target.reviewed_at)
