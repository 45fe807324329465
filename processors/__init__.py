"""
Image processors for Compactor

Raster transformations applied between decoding and encoding.
"""

from .downsample import Downsampler, fit_dimensions, MAX_WIDTH, MAX_HEIGHT

__all__ = ['Downsampler', 'fit_dimensions', 'MAX_WIDTH', 'MAX_HEIGHT']
