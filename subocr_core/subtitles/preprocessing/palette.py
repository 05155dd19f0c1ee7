# subocr_core/subtitles/preprocessing/palette.py
"""
Palette handling for VobSub bitmaps.

Turns the 16-color global palette into linear luminance, works out which of
the 4 local palette slots are actually visible in an event, and classifies
each slot as ink (text) or background.

The local palette and alpha arrays of an event are stored in reverse slot
order: slot 0 is the last stored entry. Every lookup here goes through
reversed() so the resulting tables are indexed by slot number, matching the
values in SubtitleEvent.raw_image.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from functools import reduce

import numpy as np

# (bool, bool, bool, bool), one flag per local palette slot
SlotFlags = tuple[bool, bool, bool, bool]

NO_SLOTS: SlotFlags = (False, False, False, False)


def srgb_to_linear(channel: int) -> float:
    """Convert one 8-bit sRGB channel to linear light."""
    value = channel / 255.0
    if value <= 0.04045:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def rgb_palette_to_luminance(palette: Sequence[tuple[int, int, int]]) -> list[float]:
    """Convert an sRGB palette to relative luminance, entry for entry."""
    return [
        0.2126 * srgb_to_linear(r) + 0.7152 * srgb_to_linear(g) + 0.0722 * srgb_to_linear(b)
        for r, g, b in palette
    ]


def merge_visibility(a: SlotFlags, b: SlotFlags) -> SlotFlags:
    """Combine two partial "slot seen" tables. Associative and commutative."""
    return (a[0] or b[0], a[1] or b[1], a[2] or b[2], a[3] or b[3])


def slots_seen(raw_image: np.ndarray) -> SlotFlags:
    """Which slot numbers occur anywhere in a (chunk of a) raw bitmap."""
    counts = np.bincount(raw_image.ravel(), minlength=4)
    return tuple(bool(c) for c in counts[:4])


def generate_visibility_palette(
    raw_image: np.ndarray, alpha: Sequence[int], chunk_rows: int | None = None
) -> SlotFlags:
    """
    Find all slots used by the bitmap, then drop the fully transparent ones.

    Args:
        raw_image: Slot index per pixel, shape (height, width)
        alpha: 4 alpha values in stored (reversed) order
        chunk_rows: Fold over row chunks of this size instead of the whole
            bitmap at once. The result is identical for any chunking.

    Returns:
        Visibility flag per slot, in slot order
    """
    if chunk_rows:
        chunks: Iterable[np.ndarray] = (
            raw_image[i : i + chunk_rows] for i in range(0, raw_image.shape[0], chunk_rows)
        )
        seen = reduce(merge_visibility, map(slots_seen, chunks), NO_SLOTS)
    else:
        seen = slots_seen(raw_image)

    # The alpha palette is reversed. Partial alpha counts as visible.
    return tuple(
        visible and slot_alpha != 0
        for visible, slot_alpha in zip(seen, reversed(alpha))
    )


def binarize_palette(
    luminance: Sequence[float],
    sub_palette: Sequence[int],
    visibility: SlotFlags,
    threshold: float,
) -> SlotFlags:
    """
    Generate a binarized palette where True marks a text (ink) slot.

    Each visible slot's luminance is scaled by the brightest visible slot and
    compared against threshold with a strict inequality, so threshold 1.0
    never produces ink. An image with no visible slot, or only black visible
    slots, is blank: every slot is background.
    """
    slot_luminance = [luminance[ix] for ix in reversed(sub_palette)]

    max_luminance = 0.0
    for lum, visible in zip(slot_luminance, visibility):
        if visible and lum > max_luminance:
            max_luminance = lum

    # Empty image?
    if max_luminance == 0.0:
        return NO_SLOTS

    return tuple(
        visible and (lum / max_luminance) > threshold
        for lum, visible in zip(slot_luminance, visibility)
    )
