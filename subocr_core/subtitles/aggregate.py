# subocr_core/subtitles/aggregate.py
"""Splits OCR outcomes into subtitles to write and a failure flag."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models.subtitles import OCROutcome, TimeSpan

logger = logging.getLogger(__name__)


def aggregate(outcomes: Iterable[OCROutcome]) -> tuple[list[tuple[TimeSpan, str]], bool]:
    """
    Log errors and remove bad results.

    Returns:
        (time span, text) pairs of the successful outcomes in input order,
        and whether any outcome failed
    """
    subtitles: list[tuple[TimeSpan, str]] = []
    had_failures = False

    for outcome in outcomes:
        if outcome.success:
            subtitles.append((outcome.time_span, outcome.text))
        else:
            logger.warning("Error while running OCR on subtitle image: %s", outcome.error)
            had_failures = True

    return subtitles, had_failures
