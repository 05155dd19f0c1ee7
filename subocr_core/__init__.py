# subocr_core/__init__.py
"""Core library for converting VobSub image subtitles to text with Tesseract."""

__version__ = "0.1.0"
