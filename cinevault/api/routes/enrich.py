from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from cinevault.api.deps import get_caller_privilege, get_core_services
from cinevault.schema.record import CanonicalRecord
from cinevault.services.container import CoreServices

router = APIRouter()


@router.post("")
async def enrich(
    record: CanonicalRecord,
    is_privileged: bool = Depends(get_caller_privilege),
    core: CoreServices = Depends(get_core_services),
) -> dict[str, Any]:
    """Run the enrichment stages over one identified title.

    Regional registry write-back only happens for privileged callers.
    """
    enriched = await core.enrich(record, is_privileged=is_privileged)
    return enriched.to_payload()
