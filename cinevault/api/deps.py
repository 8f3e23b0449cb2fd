from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinevault.core.config import settings
from cinevault.db.session import get_session
from cinevault.services.container import CoreServices


async def get_db() -> AsyncSession:
    async for session in get_session():
        yield session


def get_core_services(request: Request) -> CoreServices:
    return request.app.state.core


def get_caller_id(x_caller_id: str | None = Header(default=None)) -> str | None:
    """Opaque caller identity supplied by the application layer."""
    if x_caller_id is None:
        return None
    return x_caller_id.strip() or None


def get_caller_privilege(caller_id: str | None = Depends(get_caller_id)) -> bool:
    return settings.is_privileged(caller_id)
