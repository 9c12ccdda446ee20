"""Health check response models."""

from pydantic import BaseModel


class HealthResponse(BaseModel):
    """
    Standard health check response model.

    ``checks`` maps a dependency name to "ok" or "unavailable" and is only
    present on the readiness check.
    """

    status: str
    timestamp: str
    version: str | None = None
    checks: dict[str, str] | None = None
