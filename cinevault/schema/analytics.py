"""Request payloads for the derived analytics endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class RatingRequest(BaseModel):
    entries: list[dict[str, Any]] = Field(default_factory=list)
    min_minutes: float = 20
    max_minutes_cap: float | None = None


class EpisodeProgressRequest(BaseModel):
    """Episode list in viewing order plus the watch history keyed by episode id."""
    episodes: list[dict[str, Any]] = Field(default_factory=list)
    history: dict[str, dict[str, Any]] = Field(default_factory=dict)


class GenreProfileRequest(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
    use_recency: bool = False
    recency_half_life_days: float = 180


class ActorProfileRequest(BaseModel):
    items: list[dict[str, Any]] = Field(default_factory=list)
    progress_map: dict[str, dict[str, Any]] = Field(default_factory=dict)
