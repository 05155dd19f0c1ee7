# subocr_core/pipeline_components/__init__.py
"""Supporting components for the OCR run."""

from .log_manager import LogManager

__all__ = ["LogManager"]
