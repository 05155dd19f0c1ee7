# subocr_core/subtitles/preprocessing/image.py
# -*- coding: utf-8 -*-
"""
Image preprocessing pipeline for optimal Tesseract OCR.

Binarizes each VobSub bitmap through its palette, splits it into text lines
and renders each line as black text on a white, bordered 8-bit image.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from PIL import Image

from ...models.settings import AppSettings
from ...models.subtitles import ImageRegion, PreprocessedSubtitle, SubtitleEvent
from .palette import binarize_palette, generate_visibility_palette, rgb_palette_to_luminance
from .segmentation import (
    find_contiguous_scanline_groups,
    inventory_scanlines,
    scanline_groups_to_image_regions,
)

logger = logging.getLogger(__name__)

INK = 0
BACKGROUND = 255


def render_region(
    raw_image: np.ndarray, ink: Sequence[bool], region: ImageRegion, border: int
) -> Image.Image:
    """
    Rasterize one region as black ink on white, surrounded by a white border.

    The output is exactly (region.width + 2 * border) x (region.height + 2 * border).
    """
    crop = raw_image[region.y.start : region.y.stop, region.x.start : region.x.stop]
    interior = np.where(np.asarray(ink, dtype=bool)[crop], INK, BACKGROUND).astype(np.uint8)

    canvas = np.full(
        (region.height + 2 * border, region.width + 2 * border), BACKGROUND, dtype=np.uint8
    )
    canvas[border : border + region.height, border : border + region.width] = interior
    return Image.fromarray(canvas)


class ImagePreprocessor:
    """Preprocesses VobSub events into per-line images for OCR."""

    def __init__(self, palette: Sequence[tuple[int, int, int]], settings: AppSettings):
        """
        Initialize preprocessor.

        Args:
            palette: The 16-entry RGB palette from the .idx header
            settings: Threshold and border are read from here
        """
        self.luminance = rgb_palette_to_luminance(palette)
        self.threshold = settings.ocr_threshold
        self.border = settings.ocr_border

    def segment(self, event: SubtitleEvent) -> tuple[tuple[bool, ...], list[ImageRegion]]:
        """Return the ink table and the line regions of an event, top to bottom."""
        visibility = generate_visibility_palette(event.raw_image, event.alpha)
        ink = binarize_palette(self.luminance, event.palette, visibility, self.threshold)
        scanlines = inventory_scanlines(event.raw_image, ink)
        groups = find_contiguous_scanline_groups(scanlines)
        return ink, scanline_groups_to_image_regions(scanlines, groups)

    def preprocess(self, event: SubtitleEvent) -> list[Image.Image]:
        """
        Binarize, invert, and split the image into multiple lines with borders
        for direct feeding into Tesseract.

        Returns:
            One image per text line, top to bottom. Empty for a blank event.
        """
        ink, regions = self.segment(event)
        return [render_region(event.raw_image, ink, region, self.border) for region in regions]

    def to_preprocessed(self, event: SubtitleEvent) -> PreprocessedSubtitle | None:
        images = self.preprocess(event)
        if not images:
            # No images found.
            return None
        return PreprocessedSubtitle(time_span=event.time_span, force=event.force, images=images)


def preprocess_subtitles(
    events: Sequence[SubtitleEvent],
    palette: Sequence[tuple[int, int, int]],
    settings: AppSettings,
    max_workers: int | None = None,
) -> list[PreprocessedSubtitle]:
    """
    Return binarized line images for every event that contains text.

    Blank events are dropped. The remaining events keep their input order.
    """
    preprocessor = ImagePreprocessor(palette, settings)

    if max_workers == 1:
        results = map(preprocessor.to_preprocessed, events)
        subtitles = [sub for sub in results if sub is not None]
    else:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="preprocess") as pool:
            subtitles = [
                sub for sub in pool.map(preprocessor.to_preprocessed, events) if sub is not None
            ]

    skipped = len(events) - len(subtitles)
    if skipped:
        logger.info("Skipped %d blank subtitle image(s)", skipped)
    logger.debug(
        "Preprocessed %d subtitles into %d line images",
        len(subtitles),
        sum(len(sub.images) for sub in subtitles),
    )
    return subtitles
