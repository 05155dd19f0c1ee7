# subocr_core/subtitles/writers/subtitle_writer.py
# -*- coding: utf-8 -*-
"""
SRT/ASS subtitle writer.

Builds a pysubs2 SSAFile from recognized (time span, text) pairs and
serializes it to a file or to stdout.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterable
from pathlib import Path

import pysubs2
from pysubs2 import SSAEvent, SSAFile

from ...errors import SubtitleWriteError
from ...models.subtitles import TimeSpan

logger = logging.getLogger(__name__)

ASS_LINE_BREAK = '\\N'


def _clean_text(text: str, line_break: str) -> str:
    """Trim OCR output and turn its line breaks into subtitle line breaks."""
    lines = [line.strip() for line in text.strip().splitlines()]
    return line_break.join(line for line in lines if line)


def build_subtitle_file(
    subtitles: Iterable[tuple[TimeSpan, str]],
    frame_size: tuple[int, int] | None = None,
    line_break: str = ASS_LINE_BREAK,
) -> SSAFile:
    """
    Build an SSAFile holding one event per subtitle, in the given order.

    Args:
        subtitles: (time span, raw OCR text) pairs
        frame_size: Video frame size, recorded as the ASS play resolution
        line_break: Separator between text lines. SRT output stores plain
            newlines and is written with keep_ssa_tags, so braces in the
            recognized text are not read as override blocks.
    """
    subs = SSAFile()
    if frame_size is not None:
        subs.info['PlayResX'] = str(frame_size[0])
        subs.info['PlayResY'] = str(frame_size[1])

    for time_span, text in subtitles:
        subs.append(
            SSAEvent(
                start=time_span.start_ms,
                end=time_span.end_ms,
                text=_clean_text(text, line_break),
            )
        )
    return subs


def write_subtitles(
    subtitles: Iterable[tuple[TimeSpan, str]],
    output: str | Path | None,
    fmt: str = 'srt',
    frame_size: tuple[int, int] | None = None,
) -> None:
    """
    Write subtitles to output, or to stdout when output is None.

    Raises:
        SubtitleWriteError: The subtitles could not be serialized or written
    """
    if fmt == 'srt':
        subs = build_subtitle_file(subtitles, frame_size, line_break='\n')
        options = {'keep_ssa_tags': True}
    else:
        subs = build_subtitle_file(subtitles, frame_size)
        options = {}
    destination = str(output) if output is not None else '<stdout>'

    try:
        data = subs.to_string(fmt, **options)
    except (pysubs2.exceptions.Pysubs2Error, ValueError) as e:
        raise SubtitleWriteError(f"Could not generate {fmt.upper()} file: {e}") from e

    try:
        if output is None:
            sys.stdout.write(data)
            sys.stdout.flush()
        else:
            Path(output).write_text(data, encoding='utf-8')
    except OSError as e:
        raise SubtitleWriteError(f"Could not write {fmt.upper()} file {destination}: {e}") from e

    logger.info("Wrote %d subtitles to %s", len(subs), destination)
