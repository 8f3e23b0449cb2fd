"""Search response schemas for reconciled multi-source results."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MergedResultRead(BaseModel):
    """One reconciled title, keyed the way callers persist catalog records."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(default=None, alias="Title")
    year: str | None = Field(default=None, alias="Year")
    imdb_id: str | None = Field(default=None, alias="imdbID")
    media_type: str = Field(alias="Type")
    plot: str | None = Field(default=None, alias="Plot")
    poster: str | None = Field(default=None, alias="Poster")
    tmdb: dict[str, Any] | None = None
    sources_used: list[str] = Field(default_factory=list, alias="sourcesUsed")
    confidence: float = 0


class SearchResponse(BaseModel):
    query: str
    type: str
    year: str | None = None
    results: list[MergedResultRead]
