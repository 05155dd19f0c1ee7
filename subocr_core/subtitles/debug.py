# subocr_core/subtitles/debug.py
"""Dump rendered line images for inspection."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..errors import ImageDumpError
from ..models.subtitles import PreprocessedSubtitle

logger = logging.getLogger(__name__)


def dump_filename(event_index: int, line_index: int) -> str:
    return f"{event_index:06}-{line_index:02}.png"


def dump_images(subtitles: Sequence[PreprocessedSubtitle], directory: str | Path = ".") -> int:
    """
    Save every line image as PNG, named after its event and line position.

    Returns:
        Number of images written

    Raises:
        ImageDumpError: An image could not be written
    """
    directory = Path(directory)
    written = 0

    for i, subtitle in enumerate(subtitles):
        for j, image in enumerate(subtitle.images):
            path = directory / dump_filename(i, j)
            try:
                image.save(path, format="PNG")
            except (OSError, ValueError) as e:
                raise ImageDumpError(f"Could not write image dump file {path}: {e}") from e
            written += 1

    logger.info("Dumped %d line images to %s", written, directory)
    return written
