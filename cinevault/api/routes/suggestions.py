from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cinevault.api.deps import get_caller_id, get_caller_privilege, get_db
from cinevault.schema.suggestion import SuggestionCreate, SuggestionRead
from cinevault.services import suggestion_service

router = APIRouter()


@router.post("", response_model=SuggestionRead, status_code=status.HTTP_201_CREATED)
async def submit_suggestion(
    payload: SuggestionCreate,
    caller_id: str | None = Depends(get_caller_id),
    session: AsyncSession = Depends(get_db),
) -> SuggestionRead:
    suggestion = await suggestion_service.submit(
        session, caller_id, imdb_id=payload.imdb_id, title=payload.title, payload=payload.payload
    )
    return SuggestionRead.model_validate(suggestion)


@router.get("/pending", response_model=list[SuggestionRead])
async def pending_suggestions(
    caller_id: str | None = Depends(get_caller_id),
    session: AsyncSession = Depends(get_db),
) -> list[SuggestionRead]:
    suggestions = await suggestion_service.list_pending(session, caller_id)
    return [SuggestionRead.model_validate(item) for item in suggestions]


async def _review(
    action: str,
    suggestion_id: uuid.UUID,
    caller_id: str | None,
    is_privileged: bool,
    session: AsyncSession,
) -> SuggestionRead | None:
    review = suggestion_service.approve if action == "approve" else suggestion_service.reject
    suggestion = await review(session, caller_id, suggestion_id)
    if suggestion is None:
        if is_privileged:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Suggestion not found")
        return None
    return SuggestionRead.model_validate(suggestion)


@router.post("/{suggestion_id}/approve", response_model=SuggestionRead | None)
async def approve_suggestion(
    suggestion_id: uuid.UUID,
    caller_id: str | None = Depends(get_caller_id),
    is_privileged: bool = Depends(get_caller_privilege),
    session: AsyncSession = Depends(get_db),
) -> SuggestionRead | None:
    return await _review("approve", suggestion_id, caller_id, is_privileged, session)


@router.post("/{suggestion_id}/reject", response_model=SuggestionRead | None)
async def reject_suggestion(
    suggestion_id: uuid.UUID,
    caller_id: str | None = Depends(get_caller_id),
    is_privileged: bool = Depends(get_caller_privilege),
    session: AsyncSession = Depends(get_db),
) -> SuggestionRead | None:
    return await _review("reject", suggestion_id, caller_id, is_privileged, session)
