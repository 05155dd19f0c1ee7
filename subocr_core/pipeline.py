# subocr_core/pipeline.py
# -*- coding: utf-8 -*-
"""
End-to-end OCR run for a VobSub file.

This function:
1. Parses the VobSub files to extract subtitle bitmaps and timing
2. Binarizes and splits every bitmap into line images
3. Optionally dumps the line images for inspection
4. Runs Tesseract on every line image in parallel
5. Writes the recognized subtitles as SRT or ASS
"""

from __future__ import annotations

import logging
from pathlib import Path

from .models.settings import AppSettings
from .subtitles.aggregate import aggregate
from .subtitles.debug import dump_images
from .subtitles.ocr_vobsub import EngineFactory, ProgressCallback, process
from .subtitles.parsers.vobsub import VobSubParser
from .subtitles.preprocessing.image import preprocess_subtitles
from .subtitles.writers.subtitle_writer import write_subtitles

logger = logging.getLogger(__name__)


def run(
    input_path: str | Path,
    output: str | Path | None,
    settings: AppSettings,
    engine_factory: EngineFactory | None = None,
    progress_callback: ProgressCallback | None = None,
) -> int:
    """
    Convert a VobSub subtitle track to text subtitles.

    Args:
        input_path: The .idx file (or the .sub next to it)
        output: Destination file, or None for stdout
        settings: Validated settings
        engine_factory: Override for the OCR engine, mainly for tests
        progress_callback: Called as progress_callback(done, total) during OCR

    Returns:
        0 if every subtitle was recognized, 1 if any failed

    Raises:
        SubOcrError: Any fatal error (unreadable input, engine start-up, output)
    """
    input_path = Path(input_path)
    logger.info("Processing VobSub file: %s", input_path.name)

    parse_result = VobSubParser(input_path).parse()
    logger.info(
        "Found %d subtitle events (%d skipped)",
        parse_result.subtitle_count,
        len(parse_result.warnings),
    )

    subtitles = preprocess_subtitles(
        parse_result.subtitles,
        parse_result.palette,
        settings,
        max_workers=settings.ocr_workers,
    )

    # Dump images if requested.
    if settings.ocr_dump_images:
        dump_images(subtitles, settings.ocr_dump_dir)

    outcomes = process(subtitles, settings, engine_factory, progress_callback)
    pairs, had_failures = aggregate(outcomes)

    write_subtitles(
        pairs,
        output,
        settings.ocr_output_format,
        frame_size=parse_result.format_info.get("frame_size"),
    )

    return 1 if had_failures else 0
