"""Genre and actor affinity profiles over the caller's watch history.

Both profiles weight an item by ``ln(1 + minutes)`` and finish by converting
raw scores into percentages of the total, rounded to 2 decimals. Items with
non-numeric or non-positive minutes are excluded entirely. An all-zero input
yields an empty ``percent`` mapping.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Mapping

from cinevault.utils.datetime import to_epoch_ms, utcnow

DAY_MS = 1000 * 60 * 60 * 24

_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class AffinityWeights:
    recency_half_life_days: float = 180
    completion_exponent: float = 0.7
    lead_weight: float = 1.5
    main_cast_weight: float = 1.2
    supporting_weight: float = 1.0
    cameo_weight: float = 0.6
    main_cast_max_order: int = 3
    supporting_max_order: int = 10


DEFAULT_AFFINITY_WEIGHTS = AffinityWeights()


def _minutes(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


def _field(item: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in item:
            return item[name]
    return None


def extract_genres(genres: Any) -> list[str]:
    if not genres:
        return []
    if isinstance(genres, str):
        parts: Iterable[Any] = genres.split(",")
    elif isinstance(genres, (list, tuple)):
        parts = genres
    else:
        return []
    return [str(part).lower().strip() for part in parts if part and str(part).strip()]


def recency_weight(last_watched_at: Any, half_life_days: float = 180, now: datetime | None = None) -> float:
    """``exp(-age_days / half_life_days)``; items without a timestamp keep full weight."""
    watched_ms = to_epoch_ms(last_watched_at)
    if not watched_ms:
        return 1.0
    now_ms = to_epoch_ms(now or utcnow()) or 0.0
    age_days = (now_ms - watched_ms) / DAY_MS
    return math.exp(-age_days / half_life_days)


def to_percentages(scores: Mapping[str, float]) -> dict[str, float]:
    total = sum(scores.values())
    if total == 0:
        return {}
    return {key: round(value / total * 100, 2) for key, value in scores.items()}


def get_genre_profile(
    items: Iterable[Mapping[str, Any]] | None,
    use_recency: bool = False,
    recency_half_life_days: float | None = None,
    now: datetime | None = None,
    *,
    weights: AffinityWeights = DEFAULT_AFFINITY_WEIGHTS,
) -> dict[str, Any]:
    """Genre distribution where a multi-genre item splits its weight evenly across genres."""
    half_life = recency_half_life_days or weights.recency_half_life_days
    distribution: dict[str, float] = {}
    total_weight = 0.0

    for item in items or []:
        if not isinstance(item, Mapping):
            continue
        genres = extract_genres(_field(item, "genres", "genre", "Genre"))
        if not genres:
            continue
        minutes = _minutes(_field(item, "minutesWatched", "minutes_watched"))
        if minutes is None:
            continue
        weight = math.log1p(minutes)
        if use_recency:
            weight *= recency_weight(_field(item, "lastWatchedAt", "last_watched_at"), half_life, now)
        share = weight / len(genres)
        total_weight += weight
        for genre in genres:
            distribution[genre] = distribution.get(genre, 0.0) + share

    return {"raw": distribution, "percent": to_percentages(distribution), "totalWeight": total_weight}


def normalize_actor(name: Any) -> str:
    return _WHITESPACE_RE.sub(" ", str(name or "").lower()).strip()


def completion_weight(progress: Mapping[str, Any] | None, weights: AffinityWeights = DEFAULT_AFFINITY_WEIGHTS) -> float:
    """1 for completed titles, ``ratio ** 0.7`` for partial ones, 0 without progress."""
    if not progress:
        return 0.0
    if progress.get("isCompleted") is True:
        return 1.0
    watched = _field(progress, "watchedEpisodes", "watchedCount")
    total = _field(progress, "totalEpisodes", "totalCount")
    if (
        isinstance(watched, (int, float))
        and isinstance(total, (int, float))
        and not isinstance(watched, bool)
        and not isinstance(total, bool)
        and math.isfinite(watched)
        and math.isfinite(total)
        and total > 0
    ):
        return max(0.0, watched / total) ** weights.completion_exponent
    return 0.0


def role_weight(order: Any, weights: AffinityWeights = DEFAULT_AFFINITY_WEIGHTS) -> float:
    """Billing-order multiplier: lead, main cast, supporting, cameo."""
    if isinstance(order, bool) or not isinstance(order, (int, float)):
        return weights.supporting_weight
    if order == 0:
        return weights.lead_weight
    if order <= weights.main_cast_max_order:
        return weights.main_cast_weight
    if order <= weights.supporting_max_order:
        return weights.supporting_weight
    return weights.cameo_weight


def get_actor_popularity_profile(
    items: Iterable[Mapping[str, Any]] | None,
    progress_map: Mapping[str, Mapping[str, Any]] | None = None,
    *,
    weights: AffinityWeights = DEFAULT_AFFINITY_WEIGHTS,
) -> dict[str, Any]:
    progress_map = progress_map or {}
    scores: dict[str, float] = {}

    for item in items or []:
        if not isinstance(item, Mapping):
            continue
        progress = progress_map.get(_field(item, "imdbID", "imdb_id"))
        meta = item.get("meta") if isinstance(item.get("meta"), Mapping) else {}
        cast = meta.get("cast") or item.get("cast") or []
        if not progress or not isinstance(cast, list):
            continue
        completion = completion_weight(progress, weights)
        if completion == 0:
            continue
        minutes = _minutes(_field(progress, "minutesWatched", "minutes_watched"))
        if minutes is None:
            continue
        item_weight = completion * math.log1p(minutes)
        for actor in cast:
            if not isinstance(actor, Mapping) or not actor.get("name"):
                continue
            key = normalize_actor(actor["name"])
            scores[key] = scores.get(key, 0.0) + item_weight * role_weight(actor.get("order"), weights)

    return {"raw": scores, "percent": to_percentages(scores)}
