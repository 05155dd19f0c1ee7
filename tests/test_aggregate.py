# tests/test_aggregate.py
import logging

from subocr_core.errors import TextExtractionError
from subocr_core.models.subtitles import OCROutcome, TimeSpan
from subocr_core.subtitles.aggregate import aggregate


def test_failures_are_logged_and_dropped(caplog):
    outcomes = [
        OCROutcome(TimeSpan(0, 500), text="one\n"),
        OCROutcome(TimeSpan(1000, 1500), error=TextExtractionError("bad bitmap")),
        OCROutcome(TimeSpan(2000, 2500), text="three\n"),
    ]
    with caplog.at_level(logging.WARNING):
        pairs, had_failures = aggregate(outcomes)

    assert pairs == [(TimeSpan(0, 500), "one\n"), (TimeSpan(2000, 2500), "three\n")]
    assert had_failures is True
    assert "bad bitmap" in caplog.text


def test_all_successful():
    pairs, had_failures = aggregate([OCROutcome(TimeSpan(0, 1), text="")])
    assert pairs == [(TimeSpan(0, 1), "")]
    assert had_failures is False


def test_empty():
    assert aggregate([]) == ([], False)
