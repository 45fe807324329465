#!/usr/bin/env python3
"""
Functional Test: Downsampler

This test verifies:
1. fit_dimensions keeps the aspect ratio and never exceeds 400x400
2. Small images are scaled up until they touch the box
3. Downsampler.process handles palette, bilevel, alpha and 16-bit images
4. The source image is not modified

Usage:
    python tests/functional_tests/test_downsampler.py
"""

import sys
from pathlib import Path

# Add repo root to path for imports
repo_root = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(repo_root))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from PIL import Image

from utilities import Print
from processors import Downsampler, fit_dimensions, MAX_WIDTH, MAX_HEIGHT
from sample_images import make_photo


def test_fit_dimensions_landscape():
    """800x600 fits as 400x300."""
    Print("HEADER", "Testing landscape fit")
    assert fit_dimensions(800, 600) == (400, 300)
    assert fit_dimensions(1920, 1080) == (400, 225)


def test_fit_dimensions_portrait_and_square():
    """Tall and square images are limited by height."""
    Print("HEADER", "Testing portrait and square fit")
    assert fit_dimensions(600, 800) == (300, 400)
    assert fit_dimensions(1000, 1000) == (400, 400)
    assert fit_dimensions(400, 400) == (400, 400)


def test_fit_dimensions_upscales_small_images():
    """Images smaller than the box grow until one side reaches 400."""
    Print("HEADER", "Testing upscaling of small images")
    assert fit_dimensions(100, 50) == (400, 200)
    assert fit_dimensions(2, 2) == (400, 400)
    assert fit_dimensions(10, 40) == (100, 400)


def test_fit_dimensions_extreme_aspect_ratio():
    """Very thin images keep at least one pixel on the short side."""
    Print("HEADER", "Testing extreme aspect ratios")
    assert fit_dimensions(10000, 1) == (400, 1)
    assert fit_dimensions(1, 10000) == (1, 400)


def test_fit_dimensions_bounds_and_ratio():
    """Every result fits the box and keeps the ratio within rounding."""
    Print("HEADER", "Testing bounds over a range of sizes")
    for width in (1, 3, 17, 399, 400, 401, 799, 1234, 4000):
        for height in (1, 5, 33, 300, 400, 600, 2001):
            new_width, new_height = fit_dimensions(width, height)
            assert 1 <= new_width <= MAX_WIDTH
            assert 1 <= new_height <= MAX_HEIGHT
            assert new_width == MAX_WIDTH or new_height == MAX_HEIGHT

            if min(new_width, new_height) >= 10:
                source_ratio = width / height
                result_ratio = new_width / new_height
                assert abs(result_ratio - source_ratio) / source_ratio < 0.1, (width, height)


def test_fit_dimensions_rejects_empty_images():
    """Zero-sized dimensions are an error."""
    Print("HEADER", "Testing invalid dimensions")
    for width, height in ((0, 10), (10, 0), (-5, 5)):
        try:
            fit_dimensions(width, height)
        except ValueError:
            continue
        raise AssertionError(f"Expected ValueError for {width}x{height}")


def test_process_rgb():
    """RGB images are resized with Lanczos and keep their mode."""
    Print("HEADER", "Testing RGB resize")
    source = make_photo((800, 600))
    resized = Downsampler().process(source)

    assert resized.size == (400, 300)
    assert resized.mode == "RGB"
    assert source.size == (800, 600), "Source image must not be modified"


def test_process_keeps_alpha():
    """RGBA images keep their alpha channel."""
    Print("HEADER", "Testing RGBA resize")
    resized = Downsampler().process(make_photo((640, 480), "RGBA"))
    assert resized.size == (400, 300)
    assert resized.mode == "RGBA"


def test_process_palette_and_bilevel():
    """Palette and 1-bit images are expanded before resampling."""
    Print("HEADER", "Testing palette and bilevel resize")
    downsampler = Downsampler()

    palette = make_photo((500, 500), "P")
    resized = downsampler.process(palette)
    assert resized.size == (400, 400)
    assert resized.mode == "RGB"

    transparent = Image.new("P", (50, 100), 0)
    transparent.info["transparency"] = 0
    resized = downsampler.process(transparent)
    assert resized.size == (200, 400)
    assert resized.mode == "RGBA"

    bilevel = make_photo((1000, 500), "1")
    resized = downsampler.process(bilevel)
    assert resized.size == (400, 200)
    assert resized.mode == "L"


def test_process_sixteen_bit():
    """16-bit grayscale is widened to 32-bit integer before resampling."""
    Print("HEADER", "Testing 16-bit resize")
    source = Image.new("I;16", (800, 800), 1000)
    resized = Downsampler().process(source)
    assert resized.size == (400, 400)
    assert resized.mode == "I"


def test_downsampler_settings():
    """The box and filter are fixed."""
    Print("HEADER", "Testing downsampler settings")
    downsampler = Downsampler()
    assert (downsampler.max_width, downsampler.max_height) == (400, 400)
    assert downsampler.resample == Image.Resampling.LANCZOS
    assert downsampler.name == "downsample"


def main():
    """Run all downsampler tests."""
    Print("HEADER", "Functional Test: Downsampler")
    print("=" * 70)

    tests = [
        ("Landscape fit", test_fit_dimensions_landscape),
        ("Portrait and square fit", test_fit_dimensions_portrait_and_square),
        ("Upscaling", test_fit_dimensions_upscales_small_images),
        ("Extreme aspect ratio", test_fit_dimensions_extreme_aspect_ratio),
        ("Bounds and ratio", test_fit_dimensions_bounds_and_ratio),
        ("Invalid dimensions", test_fit_dimensions_rejects_empty_images),
        ("RGB resize", test_process_rgb),
        ("RGBA resize", test_process_keeps_alpha),
        ("Palette and bilevel", test_process_palette_and_bilevel),
        ("16-bit resize", test_process_sixteen_bit),
        ("Settings", test_downsampler_settings),
    ]

    results = []
    for name, test in tests:
        try:
            test()
            results.append((name, True))
        except Exception as e:
            Print("FAILURE", f"{name} failed: {e}")
            results.append((name, False))

    print("=" * 70)
    all_passed = True
    for name, passed in results:
        status = "PASSED" if passed else "FAILED"
        symbol = "✓" if passed else "✗"
        print(f"  {symbol} {name}: {status}")
        all_passed = all_passed and passed

    if all_passed:
        Print("COMPLETED", "All downsampler tests passed!")
        sys.exit(0)
    else:
        Print("FAILURE", "Some tests failed")
        sys.exit(1)


if __name__ == "__main__":
    main()
