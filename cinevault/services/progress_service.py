"""Episode progress, resume targets and per-season completion.

The progress functions read a caller-owned episode list (``id``, ``season``,
``episode``) and a watch history keyed by episode id. They never raise on
malformed input: a non-list episode argument yields ``None`` (or ``[]`` for
season buckets).

The episode update helpers return new records and leave the input untouched.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from cinevault.schema.record import CanonicalRecord
from cinevault.utils.datetime import to_epoch_ms, utcnow

UNWATCHED = "unwatched"
PARTIAL = "partial"
WATCHED = "watched"


@dataclass(frozen=True, slots=True)
class EpisodeState:
    state: str
    progress: float


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def resolve_episode_state(episode_id: Any, history: Mapping[Any, Any] | None) -> EpisodeState:
    """``watched`` wins over any progress figure; ``0 < progress < 1`` is partial."""
    record = history.get(episode_id) if isinstance(history, Mapping) else None
    if not isinstance(record, Mapping) or not record:
        return EpisodeState(UNWATCHED, 0)
    if record.get("watched") is True:
        return EpisodeState(WATCHED, 1)
    progress = record.get("progress")
    if isinstance(progress, bool) or not isinstance(progress, (int, float)) or progress <= 0:
        return EpisodeState(UNWATCHED, 0)
    if progress >= 1:
        return EpisodeState(WATCHED, 1)
    return EpisodeState(PARTIAL, progress)


def _position(episode: Mapping[str, Any]) -> dict[str, Any]:
    return {"episodeId": episode.get("id"), "season": episode.get("season"), "episode": episode.get("episode")}


def _episodes(episodes: Any) -> list[Mapping[str, Any]] | None:
    if not isinstance(episodes, list):
        return None
    return [episode for episode in episodes if isinstance(episode, Mapping)]


def calculate_episode_progress(episodes: Any, history: Mapping[Any, Any] | None = None) -> dict[str, Any] | None:
    items = _episodes(episodes)
    if items is None:
        return None

    watched = 0
    last_watched = None
    next_to_watch = None
    has_gaps = False
    for episode in items:
        state = resolve_episode_state(episode.get("id"), history)
        if state.state == WATCHED:
            watched += 1
            last_watched = _position(episode)
            continue
        # An unwatched episode after a watched one means something was skipped.
        if watched > 0:
            has_gaps = True
        if next_to_watch is None:
            next_to_watch = _position(episode)

    total = len(items)
    return {
        "watchedCount": watched,
        "totalCount": total,
        "completionPercent": _round_half_up(watched / total * 100) if total else 0,
        "lastWatched": last_watched,
        "nextToWatch": next_to_watch,
        "isCompleted": watched == total,
        "hasGaps": has_gaps,
    }


def get_resume_target(episodes: Any, history: Mapping[Any, Any] | None = None) -> dict[str, Any] | None:
    """First partial or unwatched episode in list order; ``None`` once everything is watched."""
    items = _episodes(episodes)
    if items is None:
        return None
    for episode in items:
        state = resolve_episode_state(episode.get("id"), history)
        if state.state == WATCHED:
            continue
        return {**_position(episode), "resumeFrom": state.progress if state.state == PARTIAL else 0}
    return None


def calculate_season_progress(episodes: Any, history: Mapping[Any, Any] | None = None) -> list[dict[str, Any]]:
    items = _episodes(episodes)
    if items is None:
        return []
    buckets: dict[Any, dict[str, Any]] = {}
    for episode in items:
        season = episode.get("season")
        bucket = buckets.setdefault(season, {"season": season, "watched": 0, "partial": 0, "total": 0})
        state = resolve_episode_state(episode.get("id"), history)
        bucket["total"] += 1
        if state.state == WATCHED:
            bucket["watched"] += 1
        elif state.state == PARTIAL:
            bucket["partial"] += 1
    return [
        {**bucket, "completionPercent": _round_half_up(bucket["watched"] / bucket["total"] * 100)}
        for bucket in buckets.values()
    ]


def episode_id(season: Any, episode: Any) -> str:
    return f"S{season}E{episode}"


def init_series_seasons(
    record: CanonicalRecord, total_seasons: int, episodes_per_season: int = 10
) -> CanonicalRecord:
    """Fresh ``meta.series.seasons`` structure with every episode unwatched."""
    seasons = [
        {
            "season": season,
            "episodes": [{"episode": number, "watched": False} for number in range(1, episodes_per_season + 1)],
        }
        for season in range(1, max(0, total_seasons) + 1)
    ]
    return record.model_copy(update={"meta": {**record.meta, "series": {"seasons": seasons}}})


def mark_episode(
    record: CanonicalRecord,
    season: int,
    episode: int,
    watched: bool = True,
    now: datetime | None = None,
) -> CanonicalRecord:
    """Return a copy of ``record`` with one episode's watched flag set.

    Marking an episode watched also records it as the last episode in
    ``user_meta.series`` and stamps ``watchedOn``. Records without a season
    structure come back unchanged.
    """
    series = record.meta.get("series")
    seasons = series.get("seasons") if isinstance(series, Mapping) else None
    if not isinstance(seasons, list):
        return record

    moment = now or utcnow()
    changed = False
    season_found = False
    updated_seasons = []
    for season_data in seasons:
        if not season_found and isinstance(season_data, Mapping) and season_data.get("season") == season:
            season_found = True
            updated_episodes = []
            for item in season_data.get("episodes") or []:
                if not changed and isinstance(item, Mapping) and item.get("episode") == episode:
                    item = {**item, "watched": watched}
                    changed = True
                updated_episodes.append(item)
            season_data = {**season_data, "episodes": updated_episodes}
        updated_seasons.append(season_data)

    user_meta = dict(record.user_meta)
    if changed and watched:
        user_meta["series"] = {"lastEpisode": {"season": season, "episode": episode}, "completed": False}
        user_meta["watchedOn"] = moment.date().isoformat()
    user_meta["lastUpdated"] = int(to_epoch_ms(moment) or 0)

    meta = {**record.meta, "series": {**series, "seasons": updated_seasons}}
    return record.model_copy(update={"meta": meta, "user_meta": user_meta})


def flatten_seasons(record: CanonicalRecord) -> tuple[list[dict[str, Any]], dict[str, dict[str, Any]]]:
    """Episode list and watch history derived from ``meta.series.seasons``."""
    series = record.meta.get("series")
    seasons = series.get("seasons") if isinstance(series, Mapping) else None
    episodes: list[dict[str, Any]] = []
    history: dict[str, dict[str, Any]] = {}
    for season_data in seasons if isinstance(seasons, list) else []:
        if not isinstance(season_data, Mapping):
            continue
        season = season_data.get("season")
        for item in season_data.get("episodes") or []:
            if not isinstance(item, Mapping):
                continue
            identifier = episode_id(season, item.get("episode"))
            episodes.append({"id": identifier, "season": season, "episode": item.get("episode")})
            history[identifier] = {"watched": bool(item.get("watched"))}
            if isinstance(item.get("progress"), (int, float)):
                history[identifier]["progress"] = item["progress"]
    return episodes, history
