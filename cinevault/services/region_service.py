"""Evidence-scoring classifier for East/Southeast-Asian origin.

Country and language strings from catalogs are messy ("South Korea, USA",
"Korean, English"), so the classifier accumulates positive and negative
evidence from whole-word matches inside them instead of looking values up
in a table; "malay" never fires on "Malayalam".
All point values, token lists and the threshold are provisional and live in
``RegionWeights``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from cinevault.schema.record import CanonicalRecord

_NON_ALPHA_RE = re.compile(r"[^a-z\s]")
_WHITESPACE_RE = re.compile(r"\s+")
_GENRE_HINT_RE = re.compile(r"drama|anime")
_ANIMATION_RE = re.compile(r"animation")

EAST_SE_ASIA_COUNTRIES = (
    "japan",
    "south korea",
    "north korea",
    "korea",
    "china",
    "hong kong",
    "taiwan",
    "thailand",
    "vietnam",
    "philippines",
    "malaysia",
    "indonesia",
    "singapore",
)
EAST_SE_ASIA_LANGUAGES = (
    "japanese",
    "korean",
    "mandarin",
    "cantonese",
    "chinese",
    "thai",
    "vietnamese",
    "malay",
    "indonesian",
)
WESTERN_COUNTRIES = (
    "united states",
    "usa",
    "canada",
    "united kingdom",
    "uk",
    "england",
    "france",
    "germany",
    "spain",
    "australia",
)
WESTERN_LANGUAGES = ("english", "french", "spanish", "german", "italian", "portuguese")


@dataclass(frozen=True)
class RegionWeights:
    asian_country: int = 50
    asian_language: int = 40
    genre_hint: int = 10
    western_country: int = -60
    western_language: int = -40
    western_animation_block: int = -50
    threshold: int = 50
    asian_countries: tuple[str, ...] = EAST_SE_ASIA_COUNTRIES
    asian_languages: tuple[str, ...] = EAST_SE_ASIA_LANGUAGES
    western_countries: tuple[str, ...] = WESTERN_COUNTRIES
    western_languages: tuple[str, ...] = WESTERN_LANGUAGES


DEFAULT_REGION_WEIGHTS = RegionWeights()


@dataclass(frozen=True)
class RegionDecision:
    decision: bool
    score: int
    reasons: tuple[str, ...]


def normalize_origin(value: Any) -> str:
    text = "" if value is None else str(value)
    cleaned = _NON_ALPHA_RE.sub(" ", text.lower())
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def _contains_any(haystack: str, needles: tuple[str, ...]) -> bool:
    padded = f" {haystack} "
    return any(f" {term} " in padded for term in needles)


def classify_debug(
    country: Any = None,
    language: Any = None,
    genre: Any = None,
    threshold: int | None = None,
    weights: RegionWeights = DEFAULT_REGION_WEIGHTS,
) -> RegionDecision:
    country_text = normalize_origin(country)
    language_text = normalize_origin(language)
    genre_text = normalize_origin(genre)
    origin_blob = f"{country_text} {language_text}"

    score = 0
    reasons: list[str] = []

    if _contains_any(country_text, weights.asian_countries):
        score += weights.asian_country
        reasons.append("asian-country")
    if _contains_any(language_text, weights.asian_languages):
        score += weights.asian_language
        reasons.append("asian-language")
    if _GENRE_HINT_RE.search(genre_text):
        score += weights.genre_hint
        reasons.append("genre-hint")
    if _contains_any(country_text, weights.western_countries):
        score += weights.western_country
        reasons.append("western-country")
    if _contains_any(language_text, weights.western_languages):
        score += weights.western_language
        reasons.append("western-language")
    if _ANIMATION_RE.search(genre_text) and (
        _contains_any(origin_blob, weights.western_countries)
        or _contains_any(origin_blob, weights.western_languages)
    ):
        score += weights.western_animation_block
        reasons.append("western-animation-block")

    cutoff = weights.threshold if threshold is None else threshold
    return RegionDecision(decision=score >= cutoff, score=score, reasons=tuple(reasons))


def classify(
    country: Any = None,
    language: Any = None,
    genre: Any = None,
    threshold: int | None = None,
    weights: RegionWeights = DEFAULT_REGION_WEIGHTS,
) -> bool:
    return classify_debug(country, language, genre, threshold, weights).decision


def classify_record(
    record: CanonicalRecord | Mapping[str, Any],
    threshold: int | None = None,
    weights: RegionWeights = DEFAULT_REGION_WEIGHTS,
) -> bool:
    if isinstance(record, CanonicalRecord):
        return classify(record.country, record.language, record.genre, threshold, weights)
    return classify(
        record.get("Country", record.get("country")),
        record.get("Language", record.get("language")),
        record.get("Genre", record.get("genre")),
        threshold,
        weights,
    )
