"""
Watermark Processor

Draws the weight and dimensions of a package onto its photo with Pillow.

Output format follows the input: PNG stays PNG, everything else is
re-encoded as JPEG at the configured quality. Decoding, drawing and
encoding are CPU-bound and run in a worker thread.
"""

import asyncio
import io
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw, ImageFont, UnidentifiedImageError

from watermark_service.core.exceptions import ConfigurationError, ImageDecodeError, TransformError
from watermark_service.core.logging.logger import get_logger
from watermark_service.imaging.cache_key import format_weight
from watermark_service.imaging.models import WatermarkParams

logger = get_logger(__name__)

# Text baselines, in pixels from the top-left corner
WEIGHT_TEXT_ORIGIN = (20, 50)
DIMENSIONS_TEXT_ORIGIN = (20, 90)


class PillowWatermarkTransformer:
    """
    Transformer that renders two lines of text onto the image.

    Args:
        font_path: TrueType font file; None uses Pillow's bundled font
        font_size: Font size in pixels
        color: Any Pillow color string ("#FFFFFF", "white")
        quality: JPEG quality (1-95)

    Raises:
        ConfigurationError: The font cannot be loaded or the color is invalid
    """

    def __init__(
        self,
        font_path: str | None = None,
        font_size: float = 24.0,
        color: str = "#FFFFFF",
        quality: int = 90,
    ):
        self._font = self._load_font(font_path, font_size)
        self._font_size = font_size
        self._quality = quality

        try:
            self._color = ImageColor.getrgb(color)
        except ValueError as e:
            raise ConfigurationError.from_exception(
                e, message=f"Invalid WATERMARK_COLOR '{color}'", color=color
            ) from e

    @staticmethod
    def _load_font(font_path: str | None, font_size: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
        if font_path is None:
            return ImageFont.load_default(size=font_size)

        try:
            return ImageFont.truetype(str(Path(font_path)), size=int(font_size))
        except OSError as e:
            raise ConfigurationError.from_exception(
                e, message=f"Failed to load font file {font_path}", font_path=font_path
            ) from e

    async def transform(self, data: bytes, params: WatermarkParams) -> bytes:
        """Render the watermark onto ``data``."""
        return await asyncio.to_thread(self.add_watermark, data, params)

    def add_watermark(self, data: bytes, params: WatermarkParams) -> bytes:
        """
        Synchronous watermark rendering.

        Raises:
            ImageDecodeError: ``data`` is not a decodable image
            TransformError: Drawing or encoding failed
        """
        try:
            with Image.open(io.BytesIO(data)) as source:
                source_format = source.format
                source.load()
                image = source.convert("RGBA" if source_format == "PNG" else "RGB")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise ImageDecodeError.from_exception(e, message=f"Failed to decode image: {e}") from e

        try:
            draw = ImageDraw.Draw(image)
            draw.text(
                self._top_left(WEIGHT_TEXT_ORIGIN),
                f"Weight: {format_weight(params.weight)} kg",
                font=self._font,
                fill=self._color,
            )
            draw.text(
                self._top_left(DIMENSIONS_TEXT_ORIGIN),
                f"Dimensions: {params.dimensions}",
                font=self._font,
                fill=self._color,
            )

            output = io.BytesIO()
            if source_format == "PNG":
                image.save(output, format="PNG")
            else:
                image.save(output, format="JPEG", quality=self._quality)
        except (OSError, ValueError) as e:
            raise TransformError.from_exception(e, message=f"Failed to draw watermark: {e}") from e

        logger.debug(
            "Watermark rendered",
            source_format=source_format,
            width=image.width,
            height=image.height,
            size=output.tell(),
        )
        return output.getvalue()

    def _top_left(self, baseline_origin: tuple[int, int]) -> tuple[int, int]:
        x, y = baseline_origin
        return x, max(0, y - int(self._font_size))


def detect_content_type(data: bytes) -> str:
    """Media type of a rendered image, from its signature."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    return "image/jpeg"
