from __future__ import annotations

from cinevault.schema.record import CanonicalRecord
from cinevault.services.region_service import (
    RegionWeights,
    classify,
    classify_debug,
    classify_record,
    normalize_origin,
)


def test_normalize_origin_keeps_letters_only() -> None:
    assert normalize_origin("South Korea, USA") == "south korea usa"
    assert normalize_origin(None) == ""


def test_korean_drama_is_asian() -> None:
    decision = classify_debug("South Korea", "Korean", "Drama, Romance")
    assert decision.decision is True
    assert decision.score == 100
    assert decision.reasons == ("asian-country", "asian-language", "genre-hint")


def test_language_alone_is_below_threshold() -> None:
    decision = classify_debug(None, "Japanese", None)
    assert decision.score == 40
    assert decision.decision is False


def test_western_coproduction_is_penalized() -> None:
    decision = classify_debug("South Korea, USA", "English, Korean", "Thriller")
    assert decision.score == 50 + 40 - 60 - 40
    assert decision.decision is False


def test_western_animation_block() -> None:
    decision = classify_debug("Japan, United States", "Japanese", "Animation, Action")
    assert "western-animation-block" in decision.reasons
    assert decision.decision is False

    assert classify("Japan", "Japanese", "Animation, Action") is True


def test_threshold_and_weights_are_tunable() -> None:
    assert classify(None, "Japanese", None, threshold=40) is True
    strict = RegionWeights(threshold=95)
    assert classify("Japan", "Japanese", None, weights=strict) is False


def test_classify_record_accepts_models_and_mappings() -> None:
    record = CanonicalRecord.model_validate({"Country": "Thailand", "Language": "Thai", "Genre": "Drama"})
    assert classify_record(record) is True
    assert classify_record({"Country": "France", "Language": "French", "Genre": "Drama"}) is False
    assert classify_record({"country": "Taiwan", "language": "Mandarin"}) is True


def test_tokens_match_whole_words_only() -> None:
    indian = classify_debug("India", "Malayalam", "Drama")
    assert "asian-language" not in indian.reasons
    assert indian.score == 10

    ukrainian = classify_debug("Ukraine, Japan", "Ukrainian", None)
    assert "western-country" not in ukrainian.reasons
    assert ukrainian.score == 50

    assert "western-country" in classify_debug("Japan, UK", None, None).reasons
    assert "asian-language" in classify_debug(None, "Malay", None).reasons
