"""Watch-time weighted personal rating."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

REFERENCE_MINUTES = 300


@dataclass(frozen=True)
class RatingWeights:
    min_minutes: float = 20
    reference_minutes: float = REFERENCE_MINUTES
    min_rating: float = 1
    max_rating: float = 10


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return value


def rating_confidence(minutes: float, min_minutes: float = 20, reference_minutes: float = REFERENCE_MINUTES) -> float:
    """Zero below ``min_minutes``, then a log curve saturating at 1."""
    if minutes < min_minutes:
        return 0.0
    return min(1.0, math.log1p(minutes) / math.log1p(reference_minutes))


def weighted_rating(
    entries: Iterable[Mapping[str, Any]] | None,
    min_minutes: float = 20,
    max_minutes_cap: float | None = None,
    *,
    weights: RatingWeights | None = None,
) -> dict[str, Any]:
    """Weighted mean of 1-10 ratings, each weighted by ``ln(1 + minutes) * confidence``.

    Entries with a non-numeric or out-of-range rating, or non-positive minutes,
    are skipped. When nothing contributes the result is
    ``{"weightedRating": 0, "contributingItems": 0, "breakdown": []}``.
    """
    weights = weights or RatingWeights(min_minutes=min_minutes)
    weighted_sum = 0.0
    total_weight = 0.0
    breakdown: list[dict[str, Any]] = []

    for entry in entries or []:
        if not isinstance(entry, Mapping):
            continue
        rating = _number(entry.get("rating"))
        minutes = _number(entry.get("minutesWatched", entry.get("minutes_watched")))
        if rating is None or rating < weights.min_rating or rating > weights.max_rating:
            continue
        if minutes is None or minutes <= 0:
            continue
        if max_minutes_cap:
            minutes = min(minutes, max_minutes_cap)

        confidence = rating_confidence(minutes, weights.min_minutes, weights.reference_minutes)
        if confidence == 0:
            continue
        weight = math.log1p(minutes) * confidence
        contribution = rating * weight
        weighted_sum += contribution
        total_weight += weight
        breakdown.append(
            {
                "imdbID": entry.get("imdbID", entry.get("imdb_id")),
                "rating": rating,
                "minutesWatched": minutes,
                "confidence": round(confidence, 2),
                "weight": round(weight, 2),
                "contribution": round(contribution, 2),
            }
        )

    if total_weight == 0:
        return {"weightedRating": 0, "contributingItems": 0, "breakdown": []}
    return {
        "weightedRating": round(weighted_sum / total_weight, 2),
        "contributingItems": len(breakdown),
        "breakdown": breakdown,
    }
