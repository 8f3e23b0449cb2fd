"""Score one search candidate against the caller's query.

Points are additive: exact normalized title, token-set similarity, year
proximity, a popularity signal and a small authority bonus for the two most
reliable catalogs. The constants live in ``ScoringWeights`` so they can be
tuned without touching the algorithm.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cinevault.ingestion.base import RawCandidate
from cinevault.utils.datetime import coerce_year
from cinevault.utils.normalize import normalize_title


@dataclass(frozen=True, slots=True)
class ScoringWeights:
    exact_title: int = 50
    fuzzy_max: int = 35
    exact_year: int = 25
    near_year: int = 15
    popularity_cap: int = 10
    popularity_divisor: int = 100
    rank_decay_base: int = 100
    authority_bonus: int = 5
    authoritative_sources: frozenset[str] = field(default_factory=lambda: frozenset({"tmdb", "tvmaze"}))


DEFAULT_WEIGHTS = ScoringWeights()


@dataclass(slots=True)
class ScoredCandidate:
    candidate: RawCandidate
    score: int
    reasons: list[str]


def tokenize(title: Any) -> set[str]:
    return {token for token in normalize_title(title).split(" ") if token}


def token_similarity(left: Any, right: Any) -> float:
    """Shared tokens over the size of the larger token set."""
    left_tokens = tokenize(left)
    right_tokens = tokenize(right)
    if not left_tokens or not right_tokens:
        return 0.0
    return len(left_tokens & right_tokens) / max(len(left_tokens), len(right_tokens))


def _vote_count(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        digits = value.replace(",", "").strip()
        try:
            return float(int(digits))
        except ValueError:
            return 0.0
    return None


def popularity_signal(candidate: RawCandidate, index: int, weights: ScoringWeights = DEFAULT_WEIGHTS) -> float:
    """Explicit popularity, else vote count, else a decay on result rank."""
    if candidate.popularity is not None:
        return candidate.popularity
    votes = _vote_count(candidate.votes)
    if votes is not None:
        return votes
    return max(0, weights.rank_decay_base - index)


def score_candidate(
    candidate: RawCandidate,
    query: str,
    target_year: Any = None,
    index: int = 0,
    weights: ScoringWeights = DEFAULT_WEIGHTS,
) -> ScoredCandidate:
    score = 0
    reasons: list[str] = []

    if normalize_title(candidate.title) == normalize_title(query):
        score += weights.exact_title
        reasons.append("exact-title")

    similarity = token_similarity(candidate.title, query)
    if similarity > 0:
        fuzzy = round(similarity * weights.fuzzy_max)
        score += fuzzy
        reasons.append(f"fuzzy({fuzzy})")

    wanted = coerce_year(target_year)
    found = coerce_year(candidate.year)
    if wanted is not None and found is not None:
        if wanted == found:
            score += weights.exact_year
            reasons.append("exact-year")
        elif abs(wanted - found) == 1:
            score += weights.near_year
            reasons.append("near-year")

    popularity = popularity_signal(candidate, index, weights)
    if popularity > 0:
        boost = min(weights.popularity_cap, int(popularity // weights.popularity_divisor))
        score += boost
        reasons.append(f"popularity({boost})")

    if candidate.source in weights.authoritative_sources:
        score += weights.authority_bonus
        reasons.append(f"authority({candidate.source})")

    return ScoredCandidate(candidate=candidate, score=score, reasons=reasons)
