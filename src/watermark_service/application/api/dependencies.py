"""
FastAPI Dependency Injection Module

Providers for the application singletons built during startup and kept
on ``app.state.container``. Route handlers declare what they need with the
``Annotated`` aliases at the bottom of this module; tests swap the whole
container instead of patching globals.
"""

from typing import Annotated

from fastapi import Depends, Request

from watermark_service.application.container import ServiceContainer
from watermark_service.config.settings import Settings
from watermark_service.core.interfaces.cache import CacheStore
from watermark_service.imaging.services.image_orchestrator import ImageOrchestrator
from watermark_service.infrastructure.monitoring.metrics_collector import PrometheusMetricsSink


def get_container(request: Request) -> ServiceContainer:
    """
    Retrieve the ServiceContainer from application state.

    Raises:
        RuntimeError: If called before the lifespan finished startup
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("Service container not initialized. Check application lifespan.")
    return container


def get_orchestrator(container: Annotated[ServiceContainer, Depends(get_container)]) -> ImageOrchestrator:
    """Image orchestrator for the current app instance."""
    return container.orchestrator


def get_cache(container: Annotated[ServiceContainer, Depends(get_container)]) -> CacheStore:
    """Cache store selected at startup."""
    return container.cache


def get_metrics(container: Annotated[ServiceContainer, Depends(get_container)]) -> PrometheusMetricsSink:
    """Prometheus metrics sink."""
    return container.metrics


def get_app_settings(container: Annotated[ServiceContainer, Depends(get_container)]) -> Settings:
    """Settings the container was built from."""
    return container.settings


# ============================================================================
# TYPE ALIASES FOR CLEANER ROUTE SIGNATURES
# ============================================================================

OrchestratorDep = Annotated[ImageOrchestrator, Depends(get_orchestrator)]
CacheDep = Annotated[CacheStore, Depends(get_cache)]
MetricsDep = Annotated[PrometheusMetricsSink, Depends(get_metrics)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
