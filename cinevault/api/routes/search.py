from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from cinevault.api.deps import get_core_services
from cinevault.schema.search import MergedResultRead, SearchResponse
from cinevault.services.container import CoreServices
from cinevault.services.search_service import resolve_search_type
from cinevault.utils.normalize import normalize_year

router = APIRouter()


@router.get("", response_model=SearchResponse, response_model_by_alias=True)
async def search(
    q: str = Query(default=""),
    type: str = Query(default="all"),
    year: str | None = Query(default=None),
    core: CoreServices = Depends(get_core_services),
) -> SearchResponse:
    """Ranked, reconciled results across every applicable catalog."""
    results = await core.search(q, type, year)
    return SearchResponse(
        query=q.strip(),
        type=resolve_search_type(type),
        year=normalize_year(year) or None,
        results=[MergedResultRead.model_validate(result.to_dict()) for result in results],
    )
