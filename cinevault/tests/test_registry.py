from __future__ import annotations

import pytest
from sqlalchemy import func, select

from cinevault.models.registry import ExternalRegistryEntry
from cinevault.services.registry_service import RegistryStore


@pytest.mark.asyncio
async def test_save_resolution_upserts_payload_and_mapping(session_factory) -> None:
    registry = RegistryStore(session_factory)
    await registry.save_resolution(imdb_id="tt6751668", source="mdl", source_id=9, payload={"rating": 8.6})
    await registry.save_resolution(imdb_id="tt6751668", source="mdl", source_id="9", payload={"rating": 8.8})

    assert await registry.get_payload("mdl", 9) == {"rating": 8.8}
    mapping = await registry.get_mapping("tt6751668")
    assert (mapping.source, mapping.source_id) == ("mdl", "9")

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(ExternalRegistryEntry))
        entry = (await session.execute(select(ExternalRegistryEntry))).scalar_one()
    assert count == 1
    assert entry.overridden_by == "admin"
    assert entry.updated_at.tzinfo is not None


@pytest.mark.asyncio
async def test_remapping_points_identifier_at_new_source(session_factory) -> None:
    registry = RegistryStore(session_factory)
    await registry.save_resolution(imdb_id="tt2560140", source="mdl", source_id=1, payload={})
    await registry.save_resolution(imdb_id="tt2560140", source="mal", source_id=16498, payload={"mal_id": 16498})

    mapping = await registry.get_mapping("tt2560140")
    assert (mapping.source, mapping.source_id) == ("mal", "16498")
    assert await registry.get_payload("mdl", 1) == {}
    assert await registry.get_mapping("tt0000000") is None
    assert await registry.get_payload("mal", 1) is None
