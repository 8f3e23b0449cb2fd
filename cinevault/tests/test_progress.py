"""Episode progress, resume targets and immutable season updates."""

from __future__ import annotations

from datetime import datetime, timezone

from cinevault.schema.record import CanonicalRecord
from cinevault.services.progress_service import (
    calculate_episode_progress,
    calculate_season_progress,
    flatten_seasons,
    get_resume_target,
    init_series_seasons,
    mark_episode,
    resolve_episode_state,
)

EPISODES = [
    {"id": "S1E1", "season": 1, "episode": 1},
    {"id": "S1E2", "season": 1, "episode": 2},
    {"id": "S1E3", "season": 1, "episode": 3},
    {"id": "S2E1", "season": 2, "episode": 1},
]


def test_episode_state_resolution() -> None:
    history = {
        "a": {"watched": True, "progress": 0.2},
        "b": {"progress": 0.5},
        "c": {"progress": 1},
        "d": {"progress": 0},
        "e": {},
    }
    assert resolve_episode_state("a", history).state == "watched"
    assert resolve_episode_state("b", history).progress == 0.5
    assert resolve_episode_state("b", history).state == "partial"
    assert resolve_episode_state("c", history).state == "watched"
    assert resolve_episode_state("d", history).state == "unwatched"
    assert resolve_episode_state("e", history).state == "unwatched"
    assert resolve_episode_state("missing", None).state == "unwatched"


def test_progress_with_gap() -> None:
    history = {"S1E1": {"watched": True}, "S1E3": {"watched": True}}
    progress = calculate_episode_progress(EPISODES, history)

    assert progress["watchedCount"] == 2
    assert progress["totalCount"] == 4
    assert progress["completionPercent"] == 50
    assert progress["lastWatched"] == {"episodeId": "S1E3", "season": 1, "episode": 3}
    assert progress["nextToWatch"] == {"episodeId": "S1E2", "season": 1, "episode": 2}
    assert progress["hasGaps"] is True
    assert progress["isCompleted"] is False


def test_progress_rounds_half_up_and_handles_bad_input() -> None:
    episodes = [{"id": str(i)} for i in range(8)]
    history = {"0": {"watched": True}}
    assert calculate_episode_progress(episodes, history)["completionPercent"] == 13
    assert calculate_episode_progress("not a list", {}) is None
    empty = calculate_episode_progress([], {})
    assert empty["completionPercent"] == 0
    assert empty["isCompleted"] is True


def test_resume_target_prefers_first_unfinished_episode() -> None:
    history = {"S1E1": {"watched": True}, "S1E2": {"progress": 0.4}}
    assert get_resume_target(EPISODES, history) == {
        "episodeId": "S1E2",
        "season": 1,
        "episode": 2,
        "resumeFrom": 0.4,
    }
    all_watched = {episode["id"]: {"watched": True} for episode in EPISODES}
    assert get_resume_target(EPISODES, all_watched) is None
    assert get_resume_target(EPISODES, {})["resumeFrom"] == 0
    assert get_resume_target(None, {}) is None


def test_season_progress_buckets() -> None:
    history = {"S1E1": {"watched": True}, "S1E2": {"progress": 0.3}, "S2E1": {"watched": True}}
    seasons = calculate_season_progress(EPISODES, history)
    assert seasons == [
        {"season": 1, "watched": 1, "partial": 1, "total": 3, "completionPercent": 33},
        {"season": 2, "watched": 1, "partial": 0, "total": 1, "completionPercent": 100},
    ]
    assert calculate_season_progress({}, history) == []


def test_mark_episode_returns_new_record() -> None:
    record = init_series_seasons(CanonicalRecord(title="Dark", media_type="series"), 2, episodes_per_season=3)
    moment = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)

    updated = mark_episode(record, 1, 2, now=moment)

    assert record.meta["series"]["seasons"][0]["episodes"][1]["watched"] is False
    assert record.user_meta == {}
    assert updated.meta["series"]["seasons"][0]["episodes"][1]["watched"] is True
    assert updated.user_meta["series"] == {"lastEpisode": {"season": 1, "episode": 2}, "completed": False}
    assert updated.user_meta["watchedOn"] == "2024-03-01"
    assert updated.user_meta["lastUpdated"] == int(moment.timestamp() * 1000)


def test_unmarking_keeps_last_episode_and_missing_structure_is_noop() -> None:
    record = init_series_seasons(CanonicalRecord(title="Dark"), 1, episodes_per_season=2)
    watched = mark_episode(record, 1, 1)
    unwatched = mark_episode(watched, 1, 1, watched=False)

    assert unwatched.meta["series"]["seasons"][0]["episodes"][0]["watched"] is False
    assert unwatched.user_meta["series"]["lastEpisode"] == {"season": 1, "episode": 1}

    bare = CanonicalRecord(title="Film")
    assert mark_episode(bare, 1, 1) is bare


def test_flatten_seasons_feeds_progress() -> None:
    record = init_series_seasons(CanonicalRecord(title="Dark"), 2, episodes_per_season=2)
    record = mark_episode(record, 1, 1)
    record = mark_episode(record, 1, 2)

    episodes, history = flatten_seasons(record)
    assert [episode["id"] for episode in episodes] == ["S1E1", "S1E2", "S2E1", "S2E2"]
    progress = calculate_episode_progress(episodes, history)
    assert progress["watchedCount"] == 2
    assert progress["nextToWatch"]["episodeId"] == "S2E1"


def test_gaps_only_flagged_after_a_watched_episode() -> None:
    history = {"S2E1": {"watched": True}}
    assert calculate_episode_progress(EPISODES[:3], history)["hasGaps"] is False
    assert calculate_episode_progress(EPISODES, history)["hasGaps"] is False
    assert calculate_episode_progress(list(reversed(EPISODES)), history)["hasGaps"] is True
