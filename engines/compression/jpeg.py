"""
JPEG compression engine for Compactor

Baseline JPEG through Pillow's libjpeg bindings. Quality defaults to 75.
"""

import io
from PIL import Image

from errors import EncodeError
from utilities import Print
from . import register_compressor
from .modes import is_high_depth, to_eight_bit


@register_compressor("jpeg")
class JPEGCompressorFactory:
    """Factory for creating JPEG compressor instances."""

    @staticmethod
    def create(config: dict) -> "JPEGCompressor":
        return JPEGCompressor(config)


class JPEGCompressor:
    """
    Lossy JPEG encoding.

    JPEG has no alpha channel, so transparent images are flattened onto a
    white background before encoding.

    Attributes:
        quality: libjpeg quality (1-95)
        optimize: Compute optimal Huffman tables
        progressive: Write a progressive rather than baseline JPEG
    """

    def __init__(self, config: dict):
        """
        Initialize JPEG compressor with configuration.

        Args:
            config: Configuration dictionary with optional keys:
                - quality: int - Encoder quality (default: 75)
                - optimize: bool - Optimize Huffman tables (default: False)
                - progressive: bool - Progressive encoding (default: False)
        """
        self.quality = int(config.get('quality', 75))
        self.optimize = bool(config.get('optimize', False))
        self.progressive = bool(config.get('progressive', False))

        if not 1 <= self.quality <= 100:
            raise ValueError(f"JPEG quality must be between 1 and 100, got {self.quality}")

    def _prepare(self, image: Image.Image) -> Image.Image:
        """Convert image to a mode the JPEG encoder accepts (RGB, L or CMYK)."""
        if image.mode in ('RGB', 'L', 'CMYK'):
            return image

        if image.mode == 'P' and 'transparency' in image.info:
            image = image.convert('RGBA')

        if image.mode in ('RGBA', 'LA', 'PA'):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            Print("DEBUG", f"Flattened {image.mode} onto white for JPEG")
            return background

        if is_high_depth(image):
            Print("DEBUG", f"Scaled {image.mode} to 8-bit grayscale for JPEG")
            return to_eight_bit(image)

        Print("DEBUG", f"Converted {image.mode} to RGB for JPEG")
        return image.convert('RGB')

    def compress(self, image: Image.Image) -> bytes:
        """
        Compress image to JPEG format.

        Args:
            image: PIL Image to encode

        Returns:
            JPEG file contents

        Raises:
            EncodeError: If Pillow fails to encode the image
        """
        prepared = self._prepare(image)
        buffer = io.BytesIO()

        try:
            prepared.save(
                buffer,
                format=self.pil_format,
                quality=self.quality,
                optimize=self.optimize,
                progressive=self.progressive,
            )
        except (OSError, ValueError) as e:
            raise EncodeError(
                f"Failed to write image: JPEG encoding failed for "
                f"{prepared.size[0]}x{prepared.size[1]} {prepared.mode}: {e}"
            ) from e

        data = buffer.getvalue()

        Print("DEBUG", f"JPEG: quality={self.quality} -> {len(data):,} bytes")
        return data

    @property
    def name(self) -> str:
        """Compressor identifier."""
        return "jpeg"

    @property
    def pil_format(self) -> str:
        return "JPEG"

    @property
    def extension(self) -> str:
        return "jpeg"
