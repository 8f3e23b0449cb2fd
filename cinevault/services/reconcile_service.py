"""Group scored candidates into same-title clusters and flatten each cluster.

Invariants:
- Candidates sharing a non-empty IMDb id always share a cluster, whatever
  their source or input order.
- Candidates without an IMDb id stay singletons; title and year similarity
  alone never merges two results.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cinevault.services.scoring_service import ScoredCandidate


@dataclass(slots=True)
class Cluster:
    key: str
    members: list[ScoredCandidate] = field(default_factory=list)


@dataclass(slots=True)
class MergedResult:
    title: str | None
    year: str | None
    imdb_id: str | None
    media_type: str
    plot: str | None
    poster: str | None
    tmdb: dict[str, Any] | None
    sources_used: list[str]
    confidence: int

    def to_dict(self) -> dict[str, Any]:
        """Caller payload keyed like a stored catalog record."""
        return {
            "Title": self.title,
            "Year": self.year,
            "imdbID": self.imdb_id,
            "Type": self.media_type,
            "Plot": self.plot,
            "Poster": self.poster,
            "tmdb": self.tmdb,
            "sourcesUsed": list(self.sources_used),
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> "MergedResult":
        return cls(
            title=payload.get("Title"),
            year=payload.get("Year"),
            imdb_id=payload.get("imdbID"),
            media_type=payload.get("Type") or "movie",
            plot=payload.get("Plot"),
            poster=payload.get("Poster"),
            tmdb=payload.get("tmdb"),
            sources_used=list(payload.get("sourcesUsed") or []),
            confidence=payload.get("confidence") or 0,
        )


def reconcile(scored: list[ScoredCandidate]) -> list[Cluster]:
    by_identifier: dict[str, Cluster] = {}
    singletons: list[Cluster] = []
    for index, item in enumerate(scored):
        imdb_id = item.candidate.imdb_id
        if imdb_id:
            cluster = by_identifier.setdefault(imdb_id, Cluster(key=f"imdb:{imdb_id}"))
            cluster.members.append(item)
        else:
            singletons.append(Cluster(key=f"single:{index}", members=[item]))
    return [*by_identifier.values(), *singletons]


def _first_present(ranked: list[ScoredCandidate], attribute: str) -> Any:
    for item in ranked:
        value = getattr(item.candidate, attribute)
        if value:
            return value
    return None


def merge_best(cluster: Cluster) -> MergedResult:
    """Top-scoring member wins every field it has; gaps fill in score order."""
    ranked = sorted(cluster.members, key=lambda item: item.score, reverse=True)
    primary = ranked[0]
    tmdb_id = _first_present(ranked, "tmdb_id")
    return MergedResult(
        title=_first_present(ranked, "title"),
        year=_first_present(ranked, "year"),
        imdb_id=_first_present(ranked, "imdb_id"),
        media_type=primary.candidate.media_type,
        plot=_first_present(ranked, "plot"),
        poster=_first_present(ranked, "poster"),
        tmdb={"id": tmdb_id} if tmdb_id else None,
        sources_used=[item.candidate.source for item in ranked],
        confidence=primary.score,
    )
