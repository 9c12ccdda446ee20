"""
Configuration Module

- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: Cache key layout, provider names, log stages, HTTP headers

Usage:
    from watermark_service.config import get_settings
    from watermark_service.config.constants import Stage

    settings = get_settings()
    provider = settings.cache.CACHE_PROVIDER
"""

from watermark_service.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
