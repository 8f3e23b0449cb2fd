from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from cinevault.schema.analytics import (
    ActorProfileRequest,
    EpisodeProgressRequest,
    GenreProfileRequest,
    RatingRequest,
)
from cinevault.services import progress_service, rating_service, taste_profile_service

router = APIRouter()


@router.post("/rating")
async def weighted_rating(payload: RatingRequest) -> dict[str, Any]:
    return rating_service.weighted_rating(payload.entries, payload.min_minutes, payload.max_minutes_cap)


@router.post("/progress")
async def episode_progress(payload: EpisodeProgressRequest) -> dict[str, Any] | None:
    return progress_service.calculate_episode_progress(payload.episodes, payload.history)


@router.post("/resume")
async def resume_target(payload: EpisodeProgressRequest) -> dict[str, Any] | None:
    return progress_service.get_resume_target(payload.episodes, payload.history)


@router.post("/seasons")
async def season_progress(payload: EpisodeProgressRequest) -> list[dict[str, Any]]:
    return progress_service.calculate_season_progress(payload.episodes, payload.history)


@router.post("/genres")
async def genre_profile(payload: GenreProfileRequest) -> dict[str, Any]:
    return taste_profile_service.get_genre_profile(
        payload.items,
        use_recency=payload.use_recency,
        recency_half_life_days=payload.recency_half_life_days,
    )


@router.post("/actors")
async def actor_profile(payload: ActorProfileRequest) -> dict[str, Any]:
    return taste_profile_service.get_actor_popularity_profile(payload.items, payload.progress_map)
