# subocr_core/subtitles/parsers/base.py
# -*- coding: utf-8 -*-
"""
Base classes and dataclasses for subtitle image parsing.

Provides the common result type and parser interface used by image-based
subtitle parsers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from ...models.subtitles import GlobalPalette, SubtitleEvent


@dataclass
class ParseResult:
    """
    Result of parsing a subtitle file.

    Attributes:
        subtitles: Decoded events, in file order
        palette: The 16-entry RGB palette every event's local palette points into
        format_info: Information about the source format
        warnings: Events that were skipped, with the reason
    """
    subtitles: list[SubtitleEvent] = field(default_factory=list)
    palette: GlobalPalette = field(default_factory=list)
    format_info: dict = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def subtitle_count(self) -> int:
        """Return number of subtitles extracted."""
        return len(self.subtitles)


class SubtitleImageParser(ABC):
    """
    Abstract base class for subtitle image parsers.

    Subclasses must implement:
        - parse(): Extract subtitle events from a file
        - can_parse(): Check if a file can be parsed by this parser
    """

    @abstractmethod
    def parse(self) -> ParseResult:
        """Parse the subtitle file given at construction."""

    @classmethod
    @abstractmethod
    def can_parse(cls, file_path: Path) -> bool:
        """Check if this parser can handle the given file."""

    @staticmethod
    def detect_parser(file_path: Path) -> SubtitleImageParser | None:
        """
        Detect the appropriate parser for a file based on extension.

        Returns:
            Parser instance bound to the file, or None if no parser matches
        """
        from .vobsub import VobSubParser

        file_path = Path(file_path)
        if VobSubParser.can_parse(file_path):
            return VobSubParser(file_path)
        return None
