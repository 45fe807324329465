#!/usr/bin/env python3
"""
Compactor: shrink an image to fit 400x400 and re-encode it as JPEG, PNG or WebP.

This is the main orchestrator that wires the downsampler and the
format-specific compressors together and reports how many bytes were saved.

Pipeline stages:
1. Measure the input file
2. Decode it with Pillow
3. Fit it into the 400x400 box (Lanczos)
4. Encode it with the compressor registered for the requested format
5. Atomically move the result into place and measure it

Usage:
    from compactor import CompactorPipeline

    pipeline = CompactorPipeline()
    stats = pipeline.compress_image(Path("photo.png"), Path("photo_compressed.webp"), "webp")

Or from command line:
    python compactor.py -i photo.png -f webp
"""

import copy
import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from engines.compression import get_compressor, available_formats
from engines.compression.base import ImageCompressor
from errors import (
    CompactorError,
    DecodeError,
    InputMetadataError,
    OutputDirectoryError,
    OutputFileError,
)
from processors.downsample import Downsampler
from utilities import Print, CPU_and_Mem_usage, set_debug, debug_enabled

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "config.json"

# Used when config/config.json is not shipped alongside the module
DEFAULT_CONFIG = {
    "version": __version__,
    "compression": {
        "jpeg": {"quality": 75, "optimize": False, "progressive": False},
        "png": {"optimize": True, "compress_level": 9},
        "webp": {"quality": 80, "method": 4, "lossless": False},
    },
}

PathLike = Union[str, os.PathLike]


class CompactorPipeline:
    """
    Main orchestrator for Compactor image processing.

    One pipeline can compress any number of files; each call to
    compress_image() is independent and keeps no state between runs.

    Attributes:
        config: Loaded configuration dictionary
        downsampler: Processor fitting images into the 400x400 box
    """

    def __init__(self, config_path: Optional[PathLike] = None):
        """
        Initialize pipeline with configuration.

        Args:
            config_path: Path to config.json. If None, uses config/config.json
                next to this file, or built-in defaults when that is absent.

        Raises:
            FileNotFoundError: If an explicit config_path does not exist
            ValueError: If the configuration file is not valid JSON
        """
        self.config = self._load_config(config_path)
        self.downsampler = Downsampler()
        Print("DEBUG", f"Processor: {self.downsampler.name} "
                       f"({self.downsampler.max_width}x{self.downsampler.max_height}, Lanczos)")

    def _load_config(self, config_path: Optional[PathLike]) -> dict:
        """Load configuration from JSON file and fill in encoder defaults."""
        if config_path is None:
            if not DEFAULT_CONFIG_PATH.exists():
                Print("DEBUG", "No config/config.json found, using built-in defaults")
                return copy.deepcopy(DEFAULT_CONFIG)
            config_path = DEFAULT_CONFIG_PATH

        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}\n"
                f"Create config/config.json or pass --config with an existing file."
            )

        with open(config_path) as f:
            config = json.load(f)

        if not isinstance(config, dict):
            raise ValueError(f"Configuration root must be an object: {config_path}")

        compression = config.setdefault("compression", {})
        for fmt, defaults in DEFAULT_CONFIG["compression"].items():
            compression[fmt] = {**defaults, **compression.get(fmt, {})}

        Print("DEBUG", f"Loaded configuration v{config.get('version', 'unknown')} from {config_path}")
        return config

    def compressor_for(self, format: str) -> ImageCompressor:
        """
        Build the compressor for a format using its configuration section.

        Raises:
            UnsupportedFormatError: If format is not jpeg, png or webp
        """
        fmt = format.lower()
        return get_compressor(fmt, self.config["compression"].get(fmt, {}))

    def compress_image(
        self,
        input_path: PathLike,
        output_path: PathLike,
        format: str
    ) -> dict:
        """
        Downsample one image and re-encode it in the requested format.

        The format is validated before anything is read or written, so an
        unsupported format never creates an output file or directory. The
        encoded bytes are written to a temporary file beside the output and
        renamed over it, so a failed run never leaves a truncated file.

        Args:
            input_path: Existing, readable image file
            output_path: Destination file; missing parent directories are created
            format: 'jpeg', 'png' or 'webp' (case-insensitive)

        Returns:
            dict with compression statistics:
                - original_size: Input file size in bytes
                - compressed_size: Output file size in bytes
                - reduction: original_size - compressed_size (may be negative)
                - reduction_percentage: reduction / original_size * 100
                - format: Normalized output format
                - output_path: Path of the written file
                - source_width, source_height: Decoded image size
                - width, height: Resized image size
                - processing_time: Time in seconds

        Raises:
            UnsupportedFormatError: Unknown format
            InputMetadataError: Input size cannot be read
            DecodeError: Input cannot be decoded
            OutputDirectoryError: Output directory cannot be created
            EncodeError: Encoder rejected the image
            OutputFileError: Output file cannot be written
        """
        compressor = self.compressor_for(format)

        input_path = Path(input_path)
        output_path = Path(output_path)
        start_time = datetime.now()

        # Stage 1: measure input
        try:
            input_size = input_path.stat().st_size
        except OSError as e:
            raise InputMetadataError(f"Failed to get input file metadata: {e}") from e

        Print("STATE", f"Processing: {input_path.name} -> {compressor.name}")
        Print("DEBUG", f"Input size: {input_size:,} bytes")

        # Stage 2-3: decode and downsample
        try:
            image = Image.open(input_path)
        except (OSError, Image.DecompressionBombError) as e:
            raise DecodeError(f"Failed to open image: {e}") from e

        with image:
            try:
                image.load()
            except (OSError, SyntaxError, Image.DecompressionBombError) as e:
                raise DecodeError(f"Failed to decode image: {e}") from e

            source_width, source_height = image.size
            Print("DEBUG", f"Decoded {image.format} {source_width}x{source_height} {image.mode}")

            try:
                resized = self.downsampler.process(image)
            except (OSError, ValueError) as e:
                raise DecodeError(
                    f"Failed to resize image ({image.mode} {source_width}x{source_height}): {e}"
                ) from e

        # Stage 4: make room for the output
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise OutputDirectoryError(f"Failed to create output directory: {e}") from e

        # Stage 5: encode in memory, then move into place
        data = compressor.compress(resized)
        self._write_atomically(data, output_path)

        # Statistics
        try:
            output_size = output_path.stat().st_size
        except OSError as e:
            raise OutputFileError(f"Failed to get output file metadata: {e}") from e

        reduction = input_size - output_size
        reduction_percentage = (reduction / input_size) * 100 if input_size > 0 else 0.0
        processing_time = (datetime.now() - start_time).total_seconds()

        stats = {
            'original_size': input_size,
            'compressed_size': output_size,
            'reduction': reduction,
            'reduction_percentage': reduction_percentage,
            'format': compressor.name,
            'output_path': output_path,
            'source_width': source_width,
            'source_height': source_height,
            'width': resized.width,
            'height': resized.height,
            'processing_time': processing_time,
        }

        Print("COMPLETED", f"Saved: {output_path}")
        Print("INFO", f"Original size: {input_size} bytes")
        Print("INFO", f"Compressed size: {output_size} bytes")
        Print("INFO", f"Reduction: {reduction} bytes ({reduction_percentage:.2f}%)")
        Print("DEBUG", f"Dimensions: {source_width}x{source_height} -> {resized.width}x{resized.height}")
        Print("DEBUG", f"Time: {processing_time:.3f} seconds")

        return stats

    def _write_atomically(self, data: bytes, output_path: Path) -> None:
        """
        Write data to output_path through a temporary file in the same directory.

        Raises:
            OutputFileError: If the temporary file cannot be created, written or renamed
        """
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f".{output_path.name}.",
                suffix=".tmp",
                dir=output_path.parent
            )
        except OSError as e:
            raise OutputFileError(f"Failed to create output file: {e}") from e

        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())

            # mkstemp creates files as 0600; match a regular open() instead
            umask = os.umask(0)
            os.umask(umask)
            os.chmod(temp_path, 0o666 & ~umask)

            os.replace(temp_path, output_path)
        except OSError as e:
            temp_path.unlink(missing_ok=True)
            raise OutputFileError(f"Failed to create output file: {e}") from e

        Print("DEBUG", f"Wrote {len(data):,} bytes to {output_path}")


def derive_output_path(input_path: PathLike, extension: str) -> Path:
    """
    Build the default output path for an input file.

    The final extension of the file name is replaced with
    '_compressed.<extension>', where extension is normally
    ImageCompressor.extension; directory components are never changed.

        photo.png, jpeg        -> photo_compressed.jpeg
        shots.v2/photo.png     -> shots.v2/photo_compressed.jpeg
        archive.tar.png, webp  -> archive.tar_compressed.webp
        README, png            -> README_compressed.png

    Raises:
        ValueError: If input_path has no file name component
    """
    path = Path(input_path)
    if not path.name:
        raise ValueError(f"Cannot derive an output file name from '{input_path}'")
    return path.with_name(f"{path.stem}_compressed.{extension.lower()}")


def compress_image(
    input_path: PathLike,
    output_path: PathLike,
    format: str,
    config_path: Optional[PathLike] = None
) -> dict:
    """Compress a single image with a one-off pipeline. See CompactorPipeline.compress_image."""
    return CompactorPipeline(config_path=config_path).compress_image(input_path, output_path, format)


def main(argv=None):
    """Command-line entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        prog='compactor',
        description='Compactor: compresses images to save disk space',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Supported formats: {', '.join(available_formats())}

Images are resized to fit within 400x400 pixels. Unless --output is given,
the result is written next to the input as <name>_compressed.<format>.

Examples:
  compactor -i photo.png -f jpeg
  compactor -i photo.jpg -f webp -o out/photo.webp
        """
    )

    parser.add_argument('-i', '--input', required=True, metavar='FILE',
                        help='Sets the input image file')
    parser.add_argument('-f', '--format', required=True, metavar='FORMAT',
                        help='Sets the output image format (e.g., jpeg, png, webp)')
    parser.add_argument('-o', '--output', type=Path, default=None, metavar='FILE',
                        help='Output file (default: derived from the input name)')
    parser.add_argument('--config', type=Path, default=None,
                        help='Path to config.json')
    parser.add_argument('--debug', action='store_true',
                        help='Enable verbose debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')

    args = parser.parse_args(argv)
    set_debug(args.debug)

    fmt = args.format.lower()

    try:
        Print("DEBUG", f"Arguments: {args}")
        pipeline = CompactorPipeline(config_path=args.config)
        compressor = pipeline.compressor_for(fmt)

        output = args.output
        if output is None:
            output = derive_output_path(args.input, compressor.extension)
        pipeline.compress_image(args.input, output, fmt)

        if debug_enabled():
            Print("DEBUG", CPU_and_Mem_usage())
        Print("SUCCESS", "Image compressed successfully!")
        return 0

    except CompactorError as e:
        Print("FAILURE", f"Error compressing image: {e}")
        return 1
    except FileNotFoundError as e:
        Print("FAILURE", str(e))
        return 1
    except ValueError as e:
        Print("FAILURE", str(e))
        return 1
    except KeyboardInterrupt:
        Print("WARNING", "Interrupted by user")
        return 130
    except Exception as e:
        Print("FAILURE", f"Unexpected error: {e}")
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    import sys
    sys.exit(main())
