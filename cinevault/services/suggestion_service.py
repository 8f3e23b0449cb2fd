"""User-submitted content suggestions with privileged moderation.

Unprivileged callers may submit; listing and review are silent no-ops for them.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cinevault.core.config import settings
from cinevault.models.suggestion import ContentSuggestion, SuggestionStatus
from cinevault.utils.datetime import utcnow

logger = logging.getLogger("cinevault.services.suggestions")


async def submit(
    session: AsyncSession,
    caller_id: str | None,
    *,
    imdb_id: str | None = None,
    title: str | None = None,
    payload: dict[str, Any] | None = None,
) -> ContentSuggestion:
    suggestion = ContentSuggestion(
        imdb_id=imdb_id,
        title=title,
        payload=payload or {},
        submitted_by=caller_id,
        status=SuggestionStatus.PENDING,
    )
    session.add(suggestion)
    await session.commit()
    await session.refresh(suggestion)
    return suggestion


async def list_pending(session: AsyncSession, caller_id: str | None) -> list[ContentSuggestion]:
    """Pending suggestions, oldest first; empty for unprivileged callers."""
    if not settings.is_privileged(caller_id):
        return []
    result = await session.execute(
        select(ContentSuggestion)
        .where(ContentSuggestion.status == SuggestionStatus.PENDING)
        .order_by(ContentSuggestion.created_at.asc())
    )
    return list(result.scalars().all())


async def _review(
    session: AsyncSession, caller_id: str | None, suggestion_id: uuid.UUID, status: SuggestionStatus
) -> ContentSuggestion | None:
    if not settings.is_privileged(caller_id):
        logger.info("Ignoring %s of suggestion %s by unprivileged caller", status.value, suggestion_id)
        return None
    suggestion = await session.get(ContentSuggestion, suggestion_id)
    if suggestion is None:
        return None
    suggestion.status = status
    suggestion.reviewed_at = utcnow()
    suggestion.reviewed_by = caller_id
    await session.commit()
    await session.refresh(suggestion)
    return suggestion


async def approve(session: AsyncSession, caller_id: str | None, suggestion_id: uuid.UUID) -> ContentSuggestion | None:
    return await _review(session, caller_id, suggestion_id, SuggestionStatus.APPROVED)


async def reject(session: AsyncSession, caller_id: str | None, suggestion_id: uuid.UUID) -> ContentSuggestion | None:
    return await _review(session, caller_id, suggestion_id, SuggestionStatus.REJECTED)
