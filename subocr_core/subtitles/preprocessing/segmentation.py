# subocr_core/subtitles/preprocessing/segmentation.py
"""
Line segmentation for binarized VobSub bitmaps.

Each scanline is reduced to the horizontal extent of its ink pixels, runs of
consecutive inked scanlines become text lines, and each line gets the tightest
bounding box around its extents. Processing each line separately with
Tesseract's single-line mode is far more accurate than feeding it a block.
"""

from __future__ import annotations

from collections.abc import Sequence
from functools import reduce

import numpy as np

from ...models.subtitles import ImageRegion, ScanlineExtent

Scanlines = list[ScanlineExtent | None]


def merge_extents(
    a: ScanlineExtent | None, b: ScanlineExtent | None
) -> ScanlineExtent | None:
    """Combine two partial extents of the same scanline (min/max monoid)."""
    if a is None:
        return b
    if b is None:
        return a
    return ScanlineExtent(left=min(a.left, b.left), right=max(a.right, b.right))


def merge_scanlines(a: Scanlines, b: Scanlines) -> Scanlines:
    """Row-wise merge_extents of two partial scanline inventories."""
    return [merge_extents(x, y) for x, y in zip(a, b)]


def _chunk_extents(ink_mask: np.ndarray, offset: int) -> Scanlines:
    """Per-row extents of one column chunk; offset is the chunk's first column."""
    height, width = ink_mask.shape
    if width == 0:
        return [None] * height

    has_ink = ink_mask.any(axis=1)
    lefts = ink_mask.argmax(axis=1) + offset
    rights = (width - 1) - ink_mask[:, ::-1].argmax(axis=1) + offset

    return [
        ScanlineExtent(left=int(left), right=int(right)) if inked else None
        for inked, left, right in zip(has_ink, lefts, rights)
    ]


def inventory_scanlines(
    raw_image: np.ndarray, ink: Sequence[bool], chunk_cols: int | None = None
) -> Scanlines:
    """
    Inventory each scanline of the image, recording if a given scanline has
    text pixels, and if it does, the left and right extents of the pixels on
    the scanline.

    Args:
        raw_image: Slot index per pixel, shape (height, width)
        ink: Ink flag per slot, in slot order
        chunk_cols: Compute over column chunks of this width and merge. The
            result is identical for any chunking.
    """
    ink_mask = np.asarray(ink, dtype=bool)[raw_image]
    height, width = ink_mask.shape

    if not chunk_cols or chunk_cols >= width:
        return _chunk_extents(ink_mask, 0)

    partials = [
        _chunk_extents(ink_mask[:, start : start + chunk_cols], start)
        for start in range(0, width, chunk_cols)
    ]
    return reduce(merge_scanlines, partials, [None] * height)


def find_contiguous_scanline_groups(scanlines: Scanlines) -> list[range]:
    """Find maximal ranges of contiguous, filled scanlines, top to bottom."""
    groups: list[range] = []
    start = None

    for y, extent in enumerate(scanlines):
        if extent is not None and start is None:
            start = y
        elif extent is None and start is not None:
            groups.append(range(start, y))
            start = None

    if start is not None:
        groups.append(range(start, len(scanlines)))

    return groups


def scanline_groups_to_image_regions(
    scanlines: Scanlines, groups: Sequence[range]
) -> list[ImageRegion]:
    """
    Given the list of scanlines and a list of contiguous groups, calculate
    image regions that encompass the extents.
    """
    regions = []
    for y_range in groups:
        extents = [scanlines[y] for y in y_range]
        left = min(e.left for e in extents)
        right = max(e.right for e in extents)
        regions.append(ImageRegion(x=range(left, right + 1), y=y_range))
    return regions
