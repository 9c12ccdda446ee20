"""
Unit Tests for PillowWatermarkTransformer

Runs real Pillow on small generated images.
"""

import pytest

from tests.test_fixtures import ImageTestFactory
from watermark_service.core.exceptions import ConfigurationError, ImageDecodeError
from watermark_service.core.interfaces.transformer import Transformer
from watermark_service.imaging.models import WatermarkParams
from watermark_service.imaging.processors.watermark import (
    PillowWatermarkTransformer,
    detect_content_type,
)

PARAMS = WatermarkParams(weight=12.5, dimensions="30x20x15")


@pytest.fixture
def transformer():
    return PillowWatermarkTransformer(font_size=24, color="#FFFFFF", quality=90)


@pytest.mark.unit
class TestPillowWatermarkTransformer:
    """Test rendering and re-encoding."""

    def test_implements_protocol(self, transformer):
        """Test structural conformance."""
        assert isinstance(transformer, Transformer)

    async def test_jpeg_in_jpeg_out(self, transformer, jpeg_bytes):
        """Test that JPEG input keeps its size and format."""
        result = await transformer.transform(jpeg_bytes, PARAMS)

        image = ImageTestFactory.decode(result)
        assert image.format == "JPEG"
        assert image.size == (200, 150)
        assert detect_content_type(result) == "image/jpeg"

    async def test_png_stays_png(self, transformer, png_bytes):
        """Test that PNG input keeps transparency."""
        result = await transformer.transform(png_bytes, PARAMS)

        image = ImageTestFactory.decode(result)
        assert image.format == "PNG"
        assert image.mode == "RGBA"
        assert detect_content_type(result) == "image/png"

    async def test_text_is_drawn(self, transformer, png_bytes):
        """Test that the watermark changes pixels inside the text area only."""
        result = ImageTestFactory.decode(await transformer.transform(png_bytes, PARAMS))

        text_area = result.crop((20, 0, 200, 100))
        assert text_area.getbbox() is not None
        assert result.crop((0, 120, 200, 150)).getbbox() is None

    async def test_output_is_deterministic(self, transformer, jpeg_bytes):
        """Test that identical input renders identical bytes."""
        first = await transformer.transform(jpeg_bytes, PARAMS)
        second = await transformer.transform(jpeg_bytes, PARAMS)
        assert first == second

    async def test_parameters_change_output(self, transformer, png_bytes):
        """Test that different parameters render differently."""
        a = await transformer.transform(png_bytes, PARAMS)
        b = await transformer.transform(png_bytes, WatermarkParams(weight=99, dimensions="1x1x1"))
        assert a != b

    async def test_negative_zero_weight_renders_as_zero(self, transformer, png_bytes):
        """Test that -0.0 draws the same "0.00 kg" text as 0.0."""
        zero = await transformer.transform(png_bytes, WatermarkParams(weight=0.0, dimensions="1x1x1"))
        negative_zero = await transformer.transform(png_bytes, WatermarkParams(weight=-0.0, dimensions="1x1x1"))
        assert negative_zero == zero

    async def test_garbage_input_is_decode_error(self, transformer):
        """Test undecodable bytes."""
        with pytest.raises(ImageDecodeError):
            await transformer.transform(b"definitely not an image", PARAMS)

    async def test_truncated_input_is_decode_error(self, transformer, jpeg_bytes):
        """Test a truncated JPEG."""
        with pytest.raises(ImageDecodeError):
            await transformer.transform(jpeg_bytes[:100], PARAMS)

    def test_invalid_color_is_configuration_error(self):
        """Test color validation at construction."""
        with pytest.raises(ConfigurationError):
            PillowWatermarkTransformer(color="not-a-color")

    def test_missing_font_is_configuration_error(self, tmp_path):
        """Test font loading at construction."""
        with pytest.raises(ConfigurationError):
            PillowWatermarkTransformer(font_path=str(tmp_path / "missing.ttf"))


@pytest.mark.unit
class TestDetectContentType:
    """Test media type detection."""

    def test_png_signature(self, png_bytes):
        assert detect_content_type(png_bytes) == "image/png"

    def test_everything_else_is_jpeg(self):
        assert detect_content_type(b"\xff\xd8\xff") == "image/jpeg"
