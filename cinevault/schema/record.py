"""Canonical title record exchanged with callers and passed through enrichment."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CanonicalRecord(BaseModel):
    """Base catalog fields plus the ``meta`` and ``tmdb`` bags.

    Field aliases follow the catalog payload keys callers already store
    (``imdbID``, ``Title``, ``Genre`` ...). Unknown keys are preserved so a
    caller's own fields survive a round trip through enrichment.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    imdb_id: str | None = Field(default=None, alias="imdbID")
    title: str | None = Field(default=None, alias="Title")
    year: str | None = Field(default=None, alias="Year")
    media_type: str | None = Field(default=None, alias="Type")
    plot: str | None = Field(default=None, alias="Plot")
    poster: str | None = Field(default=None, alias="Poster")
    genre: str | None = Field(default=None, alias="Genre")
    country: str | None = Field(default=None, alias="Country")
    language: str | None = Field(default=None, alias="Language")

    meta: dict[str, Any] = Field(default_factory=dict)
    tmdb: dict[str, Any] = Field(default_factory=dict)
    user_meta: dict[str, Any] = Field(default_factory=dict, alias="userMeta")
    enrichment_sources: list[str] = Field(default_factory=list, alias="enrichmentSources")
    enriched: bool = False

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, bool):
            return None
        return str(value)

    @field_validator("genre", mode="before")
    @classmethod
    def _genre_as_text(cls, value: Any) -> str | None:
        if isinstance(value, list):
            return ", ".join(str(item) for item in value if item)
        return value

    @field_validator("meta", "tmdb", "user_meta", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @property
    def is_series(self) -> bool:
        return self.media_type == "series"

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)
