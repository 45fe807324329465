"""
PNG compression engine for Compactor

Lossless deflate encoding. Size savings come entirely from the downsampling
step and from Pillow's optimize pass.
"""

import io
from PIL import Image

from errors import EncodeError
from utilities import Print
from . import register_compressor
from .modes import to_eight_bit, to_sixteen_bit

# Modes Pillow can write to PNG without conversion
PNG_MODES = ('1', 'L', 'LA', 'P', 'RGB', 'RGBA', 'I;16')


@register_compressor("png")
class PNGCompressorFactory:
    """Factory for creating PNG compressor instances."""

    @staticmethod
    def create(config: dict) -> "PNGCompressor":
        return PNGCompressor(config)


class PNGCompressor:
    """
    Lossless PNG encoding.

    Attributes:
        optimize: Let Pillow search for the smallest deflate settings
        compress_level: zlib level 0-9, only used when optimize is off
    """

    def __init__(self, config: dict):
        """
        Initialize PNG compressor with configuration.

        Args:
            config: Configuration dictionary with optional keys:
                - optimize: bool - Optimize output size (default: True)
                - compress_level: int - zlib level (default: 9)
        """
        self.optimize = bool(config.get('optimize', True))
        self.compress_level = int(config.get('compress_level', 9))

        if not 0 <= self.compress_level <= 9:
            raise ValueError(f"PNG compress_level must be between 0 and 9, got {self.compress_level}")

    def compress(self, image: Image.Image) -> bytes:
        """
        Compress image to PNG format.

        Args:
            image: PIL Image to encode

        Returns:
            PNG file contents

        Raises:
            EncodeError: If Pillow fails to encode the image
        """
        if image.mode == 'I' or image.mode.startswith('I;16'):
            image = to_sixteen_bit(image)
        elif image.mode == 'F':
            image = to_eight_bit(image)
        elif image.mode not in PNG_MODES:
            target = 'RGBA' if 'A' in image.getbands() else 'RGB'
            Print("DEBUG", f"Converted {image.mode} to {target} for PNG")
            image = image.convert(target)

        buffer = io.BytesIO()

        try:
            image.save(
                buffer,
                format=self.pil_format,
                optimize=self.optimize,
                compress_level=self.compress_level,
            )
        except (OSError, ValueError) as e:
            raise EncodeError(
                f"Failed to write image: PNG encoding failed for "
                f"{image.size[0]}x{image.size[1]} {image.mode}: {e}"
            ) from e

        data = buffer.getvalue()

        Print("DEBUG", f"PNG: optimize={self.optimize} -> {len(data):,} bytes")
        return data

    @property
    def name(self) -> str:
        """Compressor identifier."""
        return "png"

    @property
    def pil_format(self) -> str:
        return "PNG"

    @property
    def extension(self) -> str:
        return "png"
