# subocr_core/subtitles/engines/__init__.py
# -*- coding: utf-8 -*-
"""OCR engine integrations."""

from .tesseract import OCREngine, TesseractEngine

__all__ = ['OCREngine', 'TesseractEngine']
