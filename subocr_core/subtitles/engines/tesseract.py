# subocr_core/subtitles/engines/tesseract.py
# -*- coding: utf-8 -*-
"""
Tesseract OCR engine integration using tesserocr.
Direct C++ API binding, one engine per worker thread.
"""

from __future__ import annotations

import logging
from typing import Protocol

from PIL import Image

from ...errors import EngineInitError, ImageLoadError, SetVariableError, TextExtractionError
from ...models.settings import AppSettings

logger = logging.getLogger(__name__)


class OCREngine(Protocol):
    """What the OCR orchestrator needs from a recognition engine."""

    def recognize(self, image: Image.Image, dpi: int) -> str: ...

    def close(self) -> None: ...


class TesseractEngine:
    """Tesseract OCR engine wrapper using tesserocr.

    The engine is built in the constructor and must only be used from the
    thread that created it.
    """

    def __init__(self, settings: AppSettings):
        """
        Initialize Tesseract engine.

        Args:
            settings: Language, tessdata path, blacklist and extra variables are read from here

        Raises:
            EngineInitError: tesserocr is missing or Tesseract could not start
            SetVariableError: Tesseract rejected one of the variables
        """
        self.lang = settings.ocr_language
        self.tessdata_path = settings.ocr_tessdata_path
        self.blacklist = settings.ocr_char_blacklist
        self.engine_vars = list(settings.ocr_engine_vars)
        self.api = None

        try:
            import tesserocr
        except ImportError as e:
            raise EngineInitError(
                "tesserocr not installed. Please install: pip install tesserocr\n"
                "Note: This requires Tesseract OCR to be installed on your system."
            ) from e

        kwargs = {
            'lang': self.lang,
            'psm': tesserocr.PSM.SINGLE_LINE,
            'oem': tesserocr.OEM.LSTM_ONLY,
        }
        # Let tesserocr auto-detect when no path is given
        if self.tessdata_path:
            kwargs['path'] = self.tessdata_path

        try:
            self.api = tesserocr.PyTessBaseAPI(**kwargs)
        except RuntimeError as e:
            raise EngineInitError(f"Could not initialize tesseract: {e}") from e

        try:
            self._set_variable('classify_enable_learning', '0')
            self._set_variable('tessedit_char_blacklist', self.blacklist)
            for name, value in self.engine_vars:
                self._set_variable(name, value)
        except SetVariableError:
            self.close()
            raise

        logger.debug(
            "Tesseract ready: lang=%s, tessdata=%s, %d extra variable(s)",
            self.lang,
            self.tessdata_path or "<auto>",
            len(self.engine_vars),
        )

    def _set_variable(self, name: str, value: str) -> None:
        if not self.api.SetVariable(name, value):
            raise SetVariableError(name, value)

    def recognize(self, image: Image.Image, dpi: int) -> str:
        """
        Perform OCR on a single line image.

        Args:
            image: 8-bit grayscale PIL Image
            dpi: Source resolution hint

        Returns:
            Raw text as produced by Tesseract, trailing newline included
        """
        try:
            self.api.SetImage(image)
        except (RuntimeError, TypeError, ValueError) as e:
            raise ImageLoadError(f"Could not set tesseract image: {e}") from e

        self.api.SetSourceResolution(dpi)

        try:
            return self.api.GetUTF8Text()
        except RuntimeError as e:
            raise TextExtractionError(f"Could not get tesseract text: {e}") from e

    def close(self) -> None:
        """Release the Tesseract API."""
        if self.api is not None:
            self.api.End()
            self.api = None
