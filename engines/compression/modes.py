"""
Bit depth helpers shared by the compressors.

Pillow's convert() clips integer and float rasters at 255 when going to 8-bit
modes instead of rescaling, so 16-bit sources have to be scaled down first.
"""

from PIL import Image

HIGH_DEPTH_MODES = ('I', 'F')


def is_high_depth(image: Image.Image) -> bool:
    return image.mode in HIGH_DEPTH_MODES or image.mode.startswith('I;16')


def to_eight_bit(image: Image.Image) -> Image.Image:
    """
    Rescale a high bit depth grayscale image to mode 'L'.

    Integer images are treated as 16-bit (0-65535), the range Pillow decodes
    16-bit PNG and TIFF files into. Float images are scaled by their maximum.
    """
    if image.mode == 'F':
        _, high = image.getextrema()
        if high > 255:
            image = image.point(lambda v: v * (255.0 / high))
        return image.convert('L')

    if image.mode != 'I':
        image = image.convert('I')
    return image.point(lambda v: v * (1 / 256)).convert('L')


def to_sixteen_bit(image: Image.Image) -> Image.Image:
    """Store a 32-bit integer image as 'I;16'; convert() clamps to 0-65535."""
    if image.mode == 'I;16':
        return image
    if image.mode != 'I':
        image = image.convert('I')
    return image.convert('I;16')
