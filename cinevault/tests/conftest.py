"""Shared pytest fixtures for API tests, database isolation and stub sources."""

from __future__ import annotations

from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cinevault.api.deps import get_core_services, get_db
from cinevault.db.base import Base
from cinevault.ingestion.base import MOVIE, SERIES, BaseConnector, RawCandidate
from cinevault.ingestion.observability import SourceMonitor
from cinevault.main import app
from cinevault.services.cache_store import CacheStore, MemoryCacheBackend
from cinevault.services.container import CoreServices


class StubConnector(BaseConnector):
    """Connector returning canned hits; records every search call."""

    def __init__(
        self,
        source_name: str,
        hits: list[dict[str, Any]] | None = None,
        *,
        search_types: tuple[str, ...] = (MOVIE, SERIES),
        error: Exception | None = None,
        configured: bool = True,
    ) -> None:
        self.source_name = source_name
        self.search_types = search_types
        self.hits = hits
        self.error = error
        self.configured = configured
        self.calls: list[tuple[str, str, str | None]] = []

    def is_configured(self) -> bool:
        return self.configured

    async def search(self, query: str, media_type: str, year: str | None = None) -> list[dict[str, Any]] | None:
        self.calls.append((query, media_type, year))
        if self.error is not None:
            raise self.error
        return None if self.hits is None else list(self.hits)

    def to_candidate(self, raw: dict[str, Any], media_type: str) -> RawCandidate:
        return RawCandidate(
            source=self.source_name,
            title=raw["title"],
            media_type=raw.get("media_type", media_type),
            year=raw.get("year"),
            source_id=raw.get("id"),
            imdb_id=raw.get("imdb_id"),
            tmdb_id=raw.get("tmdb_id"),
            plot=raw.get("plot"),
            poster=raw.get("poster"),
            popularity=raw.get("popularity"),
            votes=raw.get("votes"),
            raw=raw,
        )


@pytest.fixture()
def stub_connector():
    return StubConnector


@pytest.fixture()
def memory_cache() -> CacheStore:
    return CacheStore(MemoryCacheBackend())


@pytest_asyncio.fixture()
async def session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path}/test.db", future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncSession:
    async with session_factory() as session:
        yield session


@pytest.fixture()
def core_services(memory_cache: CacheStore) -> CoreServices:
    connectors = {
        "tmdb": StubConnector("tmdb", []),
        "tvmaze": StubConnector("tvmaze", [], search_types=(SERIES,)),
        "omdb": StubConnector("omdb", []),
        "jikan": StubConnector("jikan", [], search_types=(SERIES,)),
        "mdl": StubConnector("mdl", [], search_types=(SERIES,)),
    }
    return CoreServices(connectors=connectors, cache=memory_cache, monitor=SourceMonitor())


@pytest_asyncio.fixture()
async def client(session: AsyncSession, core_services: CoreServices, monkeypatch: pytest.MonkeyPatch) -> AsyncClient:
    async def _get_test_db():
        yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_core_services] = lambda: core_services
    monkeypatch.setattr(app.state, "core", core_services)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_core_services, None)
