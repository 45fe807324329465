"""
Image Compressor Protocol for Compactor

Defines the contract that every output format encoder must implement.
"""

from typing import Protocol
from PIL import Image


class ImageCompressor(Protocol):
    """
    Protocol for image encoders.

    Compressors are responsible for:
    - Converting the raster to a mode the target codec accepts
    - Encoding PIL images to a complete file in memory
    - Holding deterministic encoder settings
    """

    def compress(self, image: Image.Image) -> bytes:
        """
        Encode image to bytes.

        Args:
            image: PIL Image to encode (not modified)

        Returns:
            Complete encoded file contents

        Raises:
            EncodeError: If the codec rejects the image
        """
        ...

    @property
    def name(self) -> str:
        """
        Compressor identifier, identical to the registered format name.

        Returns:
            'jpeg', 'png' or 'webp'
        """
        ...

    @property
    def pil_format(self) -> str:
        """Pillow format name passed to Image.save (e.g. 'JPEG')."""
        ...

    @property
    def extension(self) -> str:
        """File extension without the dot, used when deriving output names."""
        ...
