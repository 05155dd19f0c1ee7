# tests/conftest.py
import sys

import numpy as np
import pytest

from subocr_core.models.subtitles import PreprocessedSubtitle, SubtitleEvent, TimeSpan


@pytest.fixture
def palette():
    from tests.fakes import DEFAULT_PALETTE
    return list(DEFAULT_PALETTE)


@pytest.fixture
def make_event():
    """
    Build a SubtitleEvent from slot rows. palette/alpha are given in slot
    order and stored reversed, like the decoder does.
    """
    def _make(rows, slot_palette=(0, 1, 2, 3), slot_alpha=(0, 15, 15, 15),
              start=1.0, end=2.0, force=False):
        raw = np.array(rows, dtype=np.uint8)
        return SubtitleEvent(
            start_time=start,
            end_time=end,
            force=force,
            x=0,
            y=0,
            width=raw.shape[1],
            height=raw.shape[0],
            raw_image=raw,
            palette=tuple(reversed(slot_palette)),
            alpha=tuple(reversed(slot_alpha)),
        )
    return _make


@pytest.fixture
def make_subtitle():
    """Build a PreprocessedSubtitle from fake labelled line images."""
    from tests.fakes import labelled_image

    def _make(index, labels, delay=0.0, fail_on=()):
        images = [
            labelled_image(label, delay=delay, fail=label in fail_on) for label in labels
        ]
        return PreprocessedSubtitle(
            time_span=TimeSpan(index * 1000, index * 1000 + 500), force=False, images=images
        )
    return _make


@pytest.fixture
def fake_tesserocr(monkeypatch):
    """Install a fake tesserocr module; returns a function to rebuild it with options."""
    from tests.fakes import make_fake_tesserocr

    def _install(**kwargs):
        module = make_fake_tesserocr(**kwargs)
        monkeypatch.setitem(sys.modules, "tesserocr", module)
        return module

    _install()
    return _install


@pytest.fixture(autouse=True)
def _restore_omp_env(monkeypatch):
    """Keep OMP_THREAD_LIMIT from leaking between tests."""
    monkeypatch.delenv("OMP_THREAD_LIMIT", raising=False)
    import subocr_core.subtitles.ocr_vobsub as ov
    monkeypatch.setattr(ov, "_thread_limit_applied", False)
