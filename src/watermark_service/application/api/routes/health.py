"""
Health Check Routes

LIVENESS vs READINESS:
----------------------
- /health/live answers as long as the event loop does. It never touches a
  dependency, so a slow Redis cannot get the pod restarted.
- /health/ready pings the cache store and returns 503 when it does not
  answer, taking the instance out of rotation until it recovers.

Origin storage is not checked: a missing bucket fails at startup, and
per-request storage errors are already reported as 404 / 503.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from watermark_service.application.api.dependencies import CacheDep, SettingsDep
from watermark_service.application.api.models.health import HealthResponse
from watermark_service.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@router.get("", response_model=HealthResponse)
async def health_check(settings: SettingsDep):
    """Basic health check with the running version."""
    return HealthResponse(status="healthy", timestamp=_now(), version=settings.app.APP_VERSION)


@router.get("/live", response_model=HealthResponse)
async def liveness_check():
    """Kubernetes liveness check."""
    return HealthResponse(status="alive", timestamp=_now())


@router.get("/ready", response_model=HealthResponse)
async def readiness_check(cache: CacheDep, settings: SettingsDep):
    """
    Kubernetes readiness check.

    Raises:
        HTTPException: 503 if the cache store does not answer a ping
    """
    cache_ok = await cache.ping()
    checks = {"cache": "ok" if cache_ok else "unavailable"}

    if not cache_ok:
        logger.warning("Readiness check failed", checks=checks, provider=settings.cache.CACHE_PROVIDER)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"status": "not_ready", "checks": checks},
        )

    return HealthResponse(status="ready", timestamp=_now(), checks=checks)
