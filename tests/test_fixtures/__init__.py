"""
Test Fixtures Package

Factories for images and controllable pipeline collaborators.
"""

from tests.test_fixtures.image_factory import ImageTestFactory
from tests.test_fixtures.pipeline_factory import (
    FailingCacheStore,
    FakeBlobSource,
    FakeTransformer,
    InMemoryCacheStore,
    RecordingMetricsSink,
    SlowCacheStore,
)

__all__ = [
    "FailingCacheStore",
    "FakeBlobSource",
    "FakeTransformer",
    "ImageTestFactory",
    "InMemoryCacheStore",
    "RecordingMetricsSink",
    "SlowCacheStore",
]
