"""
WebP compression engine for Compactor

Requires Pillow built with libwebp (the default for PyPI wheels).
"""

import io
from PIL import Image, features

from errors import EncodeError
from utilities import Print
from . import register_compressor
from .modes import is_high_depth, to_eight_bit


@register_compressor("webp")
class WebPCompressorFactory:
    """Factory for creating WebP compressor instances."""

    @staticmethod
    def create(config: dict) -> "WebPCompressor":
        return WebPCompressor(config)


class WebPCompressor:
    """
    WebP encoding, lossy by default.

    Attributes:
        quality: 0-100; for lossless mode this is the compression effort
        method: Encoder speed/size trade-off, 0 (fast) to 6 (slowest)
        lossless: Use VP8L lossless encoding instead of VP8
    """

    def __init__(self, config: dict):
        """
        Initialize WebP compressor with configuration.

        Args:
            config: Configuration dictionary with optional keys:
                - quality: int - Encoder quality (default: 80)
                - method: int - Encoder method 0-6 (default: 4)
                - lossless: bool - Lossless encoding (default: False)
        """
        self.quality = int(config.get('quality', 80))
        self.method = int(config.get('method', 4))
        self.lossless = bool(config.get('lossless', False))

        if not 0 <= self.quality <= 100:
            raise ValueError(f"WebP quality must be between 0 and 100, got {self.quality}")
        if not 0 <= self.method <= 6:
            raise ValueError(f"WebP method must be between 0 and 6, got {self.method}")

    def compress(self, image: Image.Image) -> bytes:
        """
        Compress image to WebP format.

        Args:
            image: PIL Image to encode; alpha is kept

        Returns:
            WebP file contents

        Raises:
            EncodeError: If WebP support is missing or encoding fails
        """
        if not features.check('webp'):
            raise EncodeError(
                "Failed to write image: Pillow was built without WebP support"
            )

        if is_high_depth(image):
            Print("DEBUG", f"Scaled {image.mode} to 8-bit grayscale for WebP")
            image = to_eight_bit(image)
        if image.mode == 'P' and 'transparency' in image.info:
            image = image.convert('RGBA')
        if image.mode not in ('RGB', 'RGBA'):
            target = 'RGBA' if 'A' in image.getbands() else 'RGB'
            Print("DEBUG", f"Converted {image.mode} to {target} for WebP")
            image = image.convert(target)

        buffer = io.BytesIO()

        try:
            image.save(
                buffer,
                format=self.pil_format,
                quality=self.quality,
                method=self.method,
                lossless=self.lossless,
            )
        except (OSError, ValueError) as e:
            raise EncodeError(
                f"Failed to write image: WebP encoding failed for "
                f"{image.size[0]}x{image.size[1]} {image.mode}: {e}"
            ) from e

        mode = "lossless" if self.lossless else f"quality={self.quality}"
        data = buffer.getvalue()
        Print("DEBUG", f"WebP: {mode}, method={self.method} -> {len(data):,} bytes")
        return data

    @property
    def name(self) -> str:
        """Compressor identifier."""
        return "webp"

    @property
    def pil_format(self) -> str:
        return "WEBP"

    @property
    def extension(self) -> str:
        return "webp"
