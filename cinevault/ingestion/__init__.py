"""Connector registry for external catalog sources."""

from __future__ import annotations

from typing import Dict

from cinevault.ingestion.base import BaseConnector
from cinevault.ingestion.jikan import JikanConnector
from cinevault.ingestion.mdl import MDLConnector
from cinevault.ingestion.omdb import OMDbConnector
from cinevault.ingestion.tmdb import TMDBConnector
from cinevault.ingestion.tvmaze import TVMazeConnector


def build_connectors(
    *,
    tmdb_api_key: str | None = None,
    omdb_api_key: str | None = None,
    rapidapi_key: str | None = None,
    mdl_api_host: str | None = None,
) -> Dict[str, BaseConnector]:
    """Construct one connector per source; ``None`` keys fall back to settings."""
    return {
        "tmdb": TMDBConnector(api_key=tmdb_api_key),
        "tvmaze": TVMazeConnector(),
        "omdb": OMDbConnector(api_key=omdb_api_key),
        "jikan": JikanConnector(),
        "mdl": MDLConnector(api_key=rapidapi_key, host=mdl_api_host),
    }
