from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cinevault.api.deps import get_core_services
from cinevault.services.container import CoreServices

router = APIRouter()


@router.get("/cache-stats", tags=["ops"])
async def cache_stats(core: CoreServices = Depends(get_core_services)) -> dict[str, Any]:
    """Entry counts for the search cache, plus the backing medium in use."""
    return {**core.cache_stats(), "backend": core.cache.backend_name}


@router.get("/sources", tags=["ops"])
async def source_telemetry(core: CoreServices = Depends(get_core_services)) -> dict[str, Any]:
    return core.monitor.snapshot()
