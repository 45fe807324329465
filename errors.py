"""
Exceptions raised by the Compactor pipeline.

Every failure in compress_image() maps to exactly one of these classes so
callers can tell the stages apart. The original exception is chained as
__cause__.
"""


class CompactorError(RuntimeError):
    """Base class for all pipeline failures."""

    def __init__(self, message: str = "Image compression failed"):
        self.message = message
        super().__init__(self.message)


class InputMetadataError(CompactorError):
    """Input file size could not be read (missing file, permissions)."""


class DecodeError(CompactorError):
    """Input bytes could not be decoded into a raster image."""


class OutputDirectoryError(CompactorError):
    """Parent directory of the output path could not be created."""


class OutputFileError(CompactorError):
    """Output file could not be created or written."""


class EncodeError(CompactorError):
    """Resized raster could not be encoded in the requested format."""


class UnsupportedFormatError(CompactorError, ValueError):
    """Requested output format is not one of the registered compressors."""
