"""
Image Compressor Registry for Compactor

Factory pattern with decorator-based registration. Registered names are the
output formats accepted on the command line.

Usage:
    # In compressor implementation:
    @register_compressor("webp")
    class WebPCompressorFactory:
        @staticmethod
        def create(config: dict) -> ImageCompressor:
            return WebPCompressor(config)

    # To get a compressor:
    compressor = get_compressor("webp", config)
"""

from typing import Dict, Callable, List

from errors import UnsupportedFormatError
from .base import ImageCompressor

# Global registry of image compressor factories
COMPRESSOR_REGISTRY: Dict[str, Callable[[dict], ImageCompressor]] = {}


def register_compressor(name: str):
    """
    Decorator to register image compressor factories.

    Args:
        name: Output format handled by this compressor (lowercase)

    Returns:
        Decorator function that registers the factory class
    """
    def decorator(factory_class):
        COMPRESSOR_REGISTRY[name.lower()] = factory_class.create
        return factory_class
    return decorator


def available_formats() -> List[str]:
    """Sorted list of registered output formats."""
    return sorted(COMPRESSOR_REGISTRY.keys())


def get_compressor(name: str, config: dict) -> ImageCompressor:
    """
    Get an image compressor instance by format name.

    Args:
        name: Format identifier, matched case-insensitively
        config: Compressor-specific configuration dictionary

    Returns:
        Initialized image compressor instance

    Raises:
        UnsupportedFormatError: If no compressor is registered for the format
    """
    key = name.lower()
    if key not in COMPRESSOR_REGISTRY:
        available = ', '.join(available_formats()) if COMPRESSOR_REGISTRY else 'none'
        raise UnsupportedFormatError(
            f"Unsupported format: '{name}'. "
            f"Available formats: {available}"
        )
    return COMPRESSOR_REGISTRY[key](config)


# Import the built-in compressors to trigger registration
from . import jpeg, png, webp  # noqa: E402,F401
