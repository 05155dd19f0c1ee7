# subocr_core/errors.py
"""
Exception hierarchy for the subtitle OCR pipeline.

Fatal errors (configuration, input, engine construction, output) propagate out
of the run. Per-image recognition errors are caught by the OCR orchestrator and
recorded on the failing event's outcome instead.
"""

from __future__ import annotations


class SubOcrError(Exception):
    """Base class for every error raised by subocr_core."""


class ConfigError(SubOcrError):
    """A configuration value is out of range or malformed."""


class SubtitleReadError(SubOcrError):
    """The VobSub input files could not be opened or read."""


class OCRError(SubOcrError):
    """Base class for failures inside the recognition layer."""


class EngineInitError(OCRError):
    """The OCR engine could not be constructed for a worker thread."""


class SetVariableError(EngineInitError):
    """The OCR engine rejected a variable during construction."""

    def __init__(self, name: str, value: str):
        super().__init__(f"Could not set tesseract variable {name}={value!r}")
        self.name = name
        self.value = value


class ImageLoadError(OCRError):
    """A line bitmap could not be handed to the OCR engine."""


class TextExtractionError(OCRError):
    """The OCR engine failed while recognizing a line bitmap."""


class SubtitleWriteError(SubOcrError):
    """The recognized subtitles could not be serialized or written."""


class ImageDumpError(SubOcrError):
    """A rendered line bitmap could not be written to disk."""
