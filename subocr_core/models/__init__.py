# subocr_core/models/__init__.py
"""Typed data models for the OCR pipeline."""

from .settings import AppSettings
from .subtitles import (
    GlobalPalette,
    ImageRegion,
    OCROutcome,
    PreprocessedSubtitle,
    ScanlineExtent,
    SubtitleEvent,
    TimeSpan,
)

__all__ = [
    "AppSettings",
    "GlobalPalette",
    "ImageRegion",
    "OCROutcome",
    "PreprocessedSubtitle",
    "ScanlineExtent",
    "SubtitleEvent",
    "TimeSpan",
]
