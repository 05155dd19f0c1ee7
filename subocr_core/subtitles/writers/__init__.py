# subocr_core/subtitles/writers/__init__.py
# -*- coding: utf-8 -*-
"""Subtitle file writers."""

from .subtitle_writer import build_subtitle_file, write_subtitles

__all__ = ['build_subtitle_file', 'write_subtitles']
