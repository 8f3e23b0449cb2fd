from __future__ import annotations

import math

import pytest

from cinevault.services.rating_service import rating_confidence, weighted_rating


def test_confidence_curve() -> None:
    assert rating_confidence(10) == 0.0
    assert rating_confidence(20) == pytest.approx(math.log1p(20) / math.log1p(300))
    assert rating_confidence(300) == 1.0
    assert rating_confidence(5000) == 1.0


def test_empty_input_yields_zero_result() -> None:
    empty = {"weightedRating": 0, "contributingItems": 0, "breakdown": []}
    assert weighted_rating([]) == empty
    assert weighted_rating(None) == empty
    assert weighted_rating([{"rating": 8, "minutesWatched": 5}]) == empty


def test_invalid_entries_are_skipped() -> None:
    entries = [
        {"imdbID": "tt1", "rating": 11, "minutesWatched": 200},
        {"imdbID": "tt2", "rating": "8", "minutesWatched": 200},
        {"imdbID": "tt3", "rating": 7, "minutesWatched": -5},
        {"imdbID": "tt4", "rating": 7, "minutesWatched": 300},
    ]
    result = weighted_rating(entries)
    assert result["contributingItems"] == 1
    assert result["weightedRating"] == 7
    assert result["breakdown"][0]["imdbID"] == "tt4"


def test_longer_watches_dominate() -> None:
    result = weighted_rating(
        [
            {"imdbID": "tt1", "rating": 10, "minutesWatched": 2000},
            {"imdbID": "tt2", "rating": 2, "minutesWatched": 25},
        ]
    )
    assert result["contributingItems"] == 2
    assert 2 < result["weightedRating"] < 10
    assert result["weightedRating"] > 6


def test_breakdown_rows_are_rounded() -> None:
    result = weighted_rating([{"imdbID": "tt1", "rating": 8, "minutesWatched": 120}])
    row = result["breakdown"][0]
    confidence = math.log1p(120) / math.log1p(300)
    weight = math.log1p(120) * confidence
    assert row["confidence"] == round(confidence, 2)
    assert row["weight"] == round(weight, 2)
    assert row["contribution"] == round(8 * weight, 2)
    assert result["weightedRating"] == 8


def test_minutes_cap_limits_weight() -> None:
    capped = weighted_rating([{"rating": 9, "minutesWatched": 10_000}], max_minutes_cap=300)
    assert capped["breakdown"][0]["minutesWatched"] == 300
    assert capped["breakdown"][0]["confidence"] == 1.0


def test_min_minutes_is_configurable() -> None:
    assert weighted_rating([{"rating": 8, "minutesWatched": 15}], min_minutes=10)["contributingItems"] == 1


@pytest.mark.parametrize("minutes", [math.inf, math.nan, -math.inf])
def test_non_finite_minutes_do_not_contribute(minutes) -> None:
    result = weighted_rating([{"rating": 8, "minutesWatched": minutes}, {"rating": 6, "minutesWatched": 120}])
    assert result["contributingItems"] == 1
    assert result["weightedRating"] == 6


def test_non_finite_rating_is_skipped() -> None:
    assert weighted_rating([{"rating": math.inf, "minutesWatched": 120}])["contributingItems"] == 0
