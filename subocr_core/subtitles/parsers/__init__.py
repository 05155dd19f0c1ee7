# subocr_core/subtitles/parsers/__init__.py
"""Image-based subtitle parsers."""

from .base import ParseResult, SubtitleImageParser
from .vobsub import VobSubParser

__all__ = ["ParseResult", "SubtitleImageParser", "VobSubParser"]
