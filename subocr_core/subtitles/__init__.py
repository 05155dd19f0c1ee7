# subocr_core/subtitles/__init__.py
"""
VobSub subtitle OCR.

This package provides:
- VobSubParser: .idx/.sub decoding into palette-indexed bitmaps
- Preprocessing: binarization, line segmentation and rendering
- OCROrchestrator: parallel Tesseract recognition with ordered outcomes
- Writers for SRT and ASS output
"""

from .aggregate import aggregate
from .debug import dump_images
from .ocr_vobsub import OCROrchestrator, process
from .parsers import ParseResult, VobSubParser
from .preprocessing import ImagePreprocessor, preprocess_subtitles
from .writers import write_subtitles

__all__ = [
    'ImagePreprocessor',
    'OCROrchestrator',
    'ParseResult',
    'VobSubParser',
    'aggregate',
    'dump_images',
    'preprocess_subtitles',
    'process',
    'write_subtitles',
]
