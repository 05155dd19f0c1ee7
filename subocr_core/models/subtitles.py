# subocr_core/models/subtitles.py
"""
Subtitle data model shared by the decoder, the segmentation pipeline and the
OCR orchestrator.

Conventions:
    - SubtitleEvent.raw_image holds local palette slot numbers (0-3), one per
      pixel, row-major, shape (height, width).
    - SubtitleEvent.palette and SubtitleEvent.alpha are kept in the order they
      are stored in the SPU packet, which is the REVERSE of slot order:
      slot 0 is palette[3], slot 3 is palette[0].
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np
from PIL import Image

# 16 (r, g, b) entries from the .idx header
GlobalPalette = list[tuple[int, int, int]]


@dataclass(frozen=True, slots=True)
class TimeSpan:
    """Start/end pair in integer milliseconds."""

    start_ms: int
    end_ms: int

    @classmethod
    def from_seconds(cls, start: float, end: float) -> TimeSpan:
        return cls(int(start * 1000.0), int(end * 1000.0))


@dataclass
class SubtitleEvent:
    """A single decoded VobSub subtitle image with its timing."""

    start_time: float  # seconds
    end_time: float  # seconds
    force: bool
    x: int
    y: int
    width: int
    height: int
    raw_image: np.ndarray  # uint8 slot indices, shape (height, width)
    palette: tuple[int, int, int, int]  # global palette indices, stored order
    alpha: tuple[int, int, int, int]  # 0 (transparent) .. 15 (opaque), stored order

    @property
    def time_span(self) -> TimeSpan:
        return TimeSpan.from_seconds(self.start_time, self.end_time)


@dataclass(frozen=True, slots=True)
class ScanlineExtent:
    """Left and right ink columns on one scanline (both inclusive)."""

    left: int
    right: int


@dataclass(frozen=True, slots=True)
class ImageRegion:
    """Rectangular subregion of a subtitle bitmap, as half-open ranges."""

    x: range
    y: range

    @property
    def width(self) -> int:
        return len(self.x)

    @property
    def height(self) -> int:
        return len(self.y)


@dataclass
class PreprocessedSubtitle:
    """A subtitle event reduced to one binarized, bordered image per text line."""

    time_span: TimeSpan
    force: bool
    images: list[Image.Image] = field(default_factory=list)  # mode "L", top to bottom


@dataclass
class OCROutcome:
    """Recognition result for one subtitle event: text on success, error otherwise."""

    time_span: TimeSpan
    text: str | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None
