"""Cache-aside image watermarking service."""

__version__ = "1.0.0"
