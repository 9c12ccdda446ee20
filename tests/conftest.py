"""
Pytest Configuration and Shared Test Fixtures

This module provides pytest configuration and reusable fixtures for all tests.
All fixtures defined here are automatically available to all test files.
"""

import pytest
from prometheus_client import CollectorRegistry

from tests.test_fixtures import (
    FakeBlobSource,
    FakeTransformer,
    ImageTestFactory,
    InMemoryCacheStore,
    RecordingMetricsSink,
)
from watermark_service.config.settings import Settings
from watermark_service.core.background import BackgroundTaskRunner
from watermark_service.imaging.services.image_orchestrator import ImageOrchestrator
from watermark_service.infrastructure.monitoring.metrics_collector import PrometheusMetricsSink

# pytest-asyncio runs in auto mode (see pyproject.toml); async tests need no marker


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def test_settings(tmp_path):
    """
    Settings isolated from the developer's environment and .env file.

    Uses the local cache and local blob source under tmp_path.
    """
    return Settings(
        _env_file=None,
        CACHE_PROVIDER="local",
        LOCAL_CACHE_PATH=str(tmp_path / "cache"),
        STORAGE_PROVIDER="local",
        LOCAL_STORAGE_PATH=str(tmp_path / "images"),
        LOG_FORMAT="console",
    )


# ============================================================================
# Pipeline Fixtures
# ============================================================================


@pytest.fixture
def memory_cache():
    """Empty in-memory cache store."""
    return InMemoryCacheStore()


@pytest.fixture
def recording_metrics():
    """Metrics sink recording every observation."""
    return RecordingMetricsSink()


@pytest.fixture
def fake_blob_source():
    """Blob source holding one original, ``photo-42``."""
    return FakeBlobSource({"photo-42": b"original-photo-42"})


@pytest.fixture
def fake_transformer():
    """Deterministic transformer appending the parameters to the input."""
    return FakeTransformer()


@pytest.fixture
def background_runner():
    """Task runner for fire-and-forget work."""
    return BackgroundTaskRunner()


@pytest.fixture
def orchestrator(memory_cache, fake_blob_source, fake_transformer, recording_metrics, background_runner):
    """ImageOrchestrator wired to in-memory collaborators."""
    return ImageOrchestrator(
        cache=memory_cache,
        blob_source=fake_blob_source,
        transformer=fake_transformer,
        metrics=recording_metrics,
        background=background_runner,
    )


@pytest.fixture
def prometheus_metrics():
    """Prometheus sink on a private registry."""
    return PrometheusMetricsSink(CollectorRegistry())


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def jpeg_bytes():
    """Small solid-color JPEG."""
    return ImageTestFactory.jpeg_bytes()


@pytest.fixture
def png_bytes():
    """Small transparent PNG."""
    return ImageTestFactory.png_bytes()
