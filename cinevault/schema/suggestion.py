"""Content suggestion schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from cinevault.models.suggestion import SuggestionStatus
from cinevault.schema.base import ORMModel


class SuggestionCreate(BaseModel):
    imdb_id: str | None = None
    title: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)


class SuggestionRead(ORMModel):
    id: UUID
    imdb_id: str | None = None
    title: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    submitted_by: str | None = None
    status: SuggestionStatus
    created_at: datetime
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
