# subocr_core/subtitles/preprocessing/__init__.py
"""Palette binarization, line segmentation and rendering for VobSub bitmaps."""

from .image import ImagePreprocessor, preprocess_subtitles, render_region
from .palette import binarize_palette, generate_visibility_palette, rgb_palette_to_luminance
from .segmentation import (
    find_contiguous_scanline_groups,
    inventory_scanlines,
    scanline_groups_to_image_regions,
)

__all__ = [
    "ImagePreprocessor",
    "binarize_palette",
    "find_contiguous_scanline_groups",
    "generate_visibility_palette",
    "inventory_scanlines",
    "preprocess_subtitles",
    "render_region",
    "rgb_palette_to_luminance",
    "scanline_groups_to_image_regions",
]
