"""FastAPI application entrypoint and health reporting.

Invariants:
- The process builds exactly one ``CoreServices`` graph and shares it through
  ``app.state``; routes reach it via dependency injection.
"""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cinevault.api.router import api_router
from cinevault.core.config import settings
from cinevault.core.logging import configure_logging
from cinevault.db.session import SessionLocal, init_models
from cinevault.services.container import CoreServices

configure_logging()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)
app.state.core = CoreServices.from_settings(SessionLocal)


@app.on_event("startup")
async def _create_tables() -> None:
    await init_models()


def _summarize_sources(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Fold the per-source monitor snapshot into states plus a flat issue list.

    A source is degraded while its circuit cools down, after three failed
    calls, or whenever its most recent call left an error behind.
    """
    issues: list[dict[str, Any]] = []
    sources: dict[str, Any] = {}
    for source, payload in snapshot.items():
        circuit = payload.get("circuit", {})
        calls = payload.get("calls", {})
        remaining = float(circuit.get("remaining_cooldown") or 0.0)
        failed = int(calls.get("failed") or 0)
        last_error = calls.get("last_error")
        state = "ok"
        if remaining > 0:
            issues.append({"source": source, "reason": "circuit_open", "remaining_cooldown": round(remaining, 2)})
            state = "degraded"
        if failed >= 3:
            issues.append({"source": source, "reason": "repeated_failures", "failed": failed})
            state = "degraded"
        elif last_error:
            issues.append({"source": source, "reason": "last_error", "error": last_error})
            state = "degraded"
        sources[source] = {
            "state": state,
            "circuit_open": remaining > 0,
            "circuit": circuit,
            "calls": calls,
            "last_error": last_error,
        }
    return {"sources": sources, "issues": issues}


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health() -> dict[str, Any]:
    """Return overall status with per-source search telemetry and cache stats."""
    core: CoreServices = app.state.core
    telemetry = _summarize_sources(core.monitor.snapshot())
    status = "ok" if not telemetry["issues"] else "degraded"
    return {"status": status, "sources": telemetry, "cache": core.cache_stats()}
