"""
Downsampling processor for Compactor.

Every image is fitted into a fixed 400x400 box before encoding. The box and
the Lanczos filter are constants: output sizes of repeated runs must not
depend on configuration.

Fitting follows "touch the box" semantics: the scale factor is the smaller
of max_width/width and max_height/height, so an image smaller than the box
is scaled up until one side reaches it.
"""

from typing import Tuple

from PIL import Image

from utilities import Print

MAX_WIDTH = 400
MAX_HEIGHT = 400
RESAMPLING_FILTER = Image.Resampling.LANCZOS


def fit_dimensions(
    width: int,
    height: int,
    max_width: int = MAX_WIDTH,
    max_height: int = MAX_HEIGHT
) -> Tuple[int, int]:
    """
    Compute the largest size with the same aspect ratio that fits the box.

    Args:
        width: Source width in pixels
        height: Source height in pixels
        max_width: Box width
        max_height: Box height

    Returns:
        (new_width, new_height), each in [1, max]

    Raises:
        ValueError: If any dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if max_width <= 0 or max_height <= 0:
        raise ValueError(f"Bounding box must be positive, got {max_width}x{max_height}")

    ratio = min(max_width / width, max_height / height)
    new_width = min(max(round(width * ratio), 1), max_width)
    new_height = min(max(round(height * ratio), 1), max_height)
    return new_width, new_height


class Downsampler:
    """
    Resize images to fit the Compactor bounding box.

    Attributes:
        max_width: Box width (400)
        max_height: Box height (400)
        resample: Pillow resampling filter (Lanczos)
    """

    def __init__(self):
        self.max_width = MAX_WIDTH
        self.max_height = MAX_HEIGHT
        self.resample = RESAMPLING_FILTER

    def process(self, image: Image.Image) -> Image.Image:
        """
        Return a resized copy of image; the input is left untouched.

        Palette and bilevel images are expanded first because Pillow only
        supports nearest-neighbour resampling on them.
        """
        target = fit_dimensions(image.width, image.height, self.max_width, self.max_height)

        if image.mode == 'P':
            image = image.convert('RGBA' if 'transparency' in image.info else 'RGB')
        elif image.mode == '1':
            image = image.convert('L')
        elif image.mode.startswith('I;16'):
            image = image.convert('I')

        resized = image.resize(target, self.resample)
        Print("DEBUG", f"Resized {image.width}x{image.height} -> {target[0]}x{target[1]} (Lanczos)")
        return resized

    @property
    def name(self) -> str:
        """Processor identifier."""
        return "downsample"
