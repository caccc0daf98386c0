"""Health check endpoints."""

from typing import Any

from fastapi import APIRouter

from crm_assistant.core.redis_client import check_redis_health

router = APIRouter(tags=["health"])


@router.get("/health")
async def health() -> dict[str, Any]:
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "crm-assistant-gateway"}


@router.get("/ready")
async def ready() -> dict[str, Any]:
    """
    Readiness check.

    The listing cache is the only infrastructure the gateway talks to
    directly. A cache outage degrades answers but does not stop them, so
    it is reported without failing the check.
    """
    redis_ok = await check_redis_health()
    return {
        "status": "ready" if redis_ok else "degraded",
        "checks": {"redis": "ok" if redis_ok else "unavailable"},
    }
