"""Health check endpoints."""

import httpx
from fastapi import APIRouter

from gello.config import get_settings
from gello.db.session import ServiceDB
from gello.exceptions import DataServiceError

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check() -> dict[str, str]:
    """Basic health check."""
    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(db: ServiceDB) -> dict[str, str | dict[str, str]]:
    """Readiness check including data and auth service reachability."""
    checks: dict[str, str] = {}

    # Check database
    try:
        await db.ping()
        checks["database"] = "healthy"
    except DataServiceError as e:
        checks["database"] = f"unhealthy: {e.message}"

    # Check auth service
    try:
        async with httpx.AsyncClient(timeout=settings.supabase_timeout_seconds) as client:
            response = await client.get(
                f"{settings.supabase_url.rstrip('/')}/auth/v1/health",
                headers={"apikey": settings.supabase_publishable_key.get_secret_value()},
            )
            response.raise_for_status()
        checks["auth"] = "healthy"
    except httpx.HTTPError as e:
        checks["auth"] = f"unhealthy: {str(e)}"

    overall_status = "healthy" if all(v == "healthy" for v in checks.values()) else "unhealthy"

    return {
        "status": overall_status,
        "version": settings.app_version,
        "checks": checks,
    }
