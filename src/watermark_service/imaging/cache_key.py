"""
Cache Key Builder

Derives deterministic cache keys for watermarked renditions.

Key layout::

    image:{image_id}:{weight:.2f}:{dimensions}

The fixed ``image`` namespace lets ``image:{image_id}:*`` select every
rendition of one original without touching other identifiers. Weight is
always formatted with two decimals so 12.5, 12.50 and 12.500 share a key.
"""

from watermark_service.config.constants import CACHE_KEY_PREFIX, CACHE_KEY_SEPARATOR
from watermark_service.imaging.models import WatermarkParams


def format_weight(weight: float) -> str:
    """
    Render a weight with two decimals.

    Negative zero, and anything that rounds to it, renders as "0.00".
    """
    text = f"{weight:.2f}"
    return "0.00" if text == "-0.00" else text


def build_cache_key(image_id: str, params: WatermarkParams) -> str:
    """
    Build the cache key for one rendition.

    Pure function: no I/O, no shared state.

    Example:
        >>> build_cache_key("photo-42", WatermarkParams(weight=12.5, dimensions="30x20x15"))
        'image:photo-42:12.50:30x20x15'
    """
    return CACHE_KEY_SEPARATOR.join(
        (CACHE_KEY_PREFIX, image_id, format_weight(params.weight), params.dimensions)
    )


def build_invalidation_pattern(image_id: str) -> str:
    """
    Build the glob pattern covering every rendition of ``image_id``.

    Glob metacharacters in the identifier are wrapped in single-character
    classes so "photo-4*" cannot select "photo-42". A backslash is doubled
    inside its class: Redis MATCH reads ``[\\\\]`` as an escaped backslash
    and fnmatch as a class listing it twice, so both match one backslash.
    """
    return CACHE_KEY_SEPARATOR.join((CACHE_KEY_PREFIX, _escape_glob(image_id), "*"))


def _escape_glob(value: str) -> str:
    return "".join(_escape_char(char) for char in value)


def _escape_char(char: str) -> str:
    if char == "\\":
        return "[\\\\]"
    if char in "*?[":
        return f"[{char}]"
    return char
