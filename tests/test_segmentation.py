# tests/test_segmentation.py
import numpy as np
import pytest

from subocr_core.models.settings import AppSettings
from subocr_core.models.subtitles import ImageRegion, ScanlineExtent
from subocr_core.subtitles.preprocessing.image import (
    BACKGROUND,
    INK,
    ImagePreprocessor,
    preprocess_subtitles,
    render_region,
)
from subocr_core.subtitles.preprocessing.segmentation import (
    find_contiguous_scanline_groups,
    inventory_scanlines,
    merge_extents,
    scanline_groups_to_image_regions,
)

INK_SLOT_1 = (False, True, False, False)


def _scanlines_with_ink_on(rows, height=10):
    return [ScanlineExtent(0, 0) if y in rows else None for y in range(height)]


def test_groups_are_maximal_runs():
    scanlines = _scanlines_with_ink_on({2, 3, 4, 7, 8})
    assert find_contiguous_scanline_groups(scanlines) == [range(2, 5), range(7, 9)]


def test_groups_touching_image_edges():
    scanlines = _scanlines_with_ink_on({0, 1, 9})
    assert find_contiguous_scanline_groups(scanlines) == [range(0, 2), range(9, 10)]


def test_blank_image_has_no_groups():
    assert find_contiguous_scanline_groups([None] * 6) == []
    assert find_contiguous_scanline_groups([]) == []


def test_region_is_tightest_box_over_group():
    scanlines = [None, None, ScanlineExtent(3, 10), ScanlineExtent(1, 12), ScanlineExtent(5, 9), None]
    regions = scanline_groups_to_image_regions(scanlines, [range(2, 5)])
    assert regions == [ImageRegion(x=range(1, 13), y=range(2, 5))]
    assert regions[0].width == 12
    assert regions[0].height == 3


def test_inventory_records_ink_extents():
    raw = np.array([
        [0, 0, 0, 0, 0],
        [0, 1, 0, 1, 0],
        [2, 2, 2, 2, 2],
        [1, 0, 0, 0, 1],
    ], dtype=np.uint8)
    assert inventory_scanlines(raw, INK_SLOT_1) == [
        None,
        ScanlineExtent(1, 3),
        None,
        ScanlineExtent(0, 4),
    ]


def test_inventory_identical_for_any_column_chunking():
    rng = np.random.default_rng(3)
    raw = rng.integers(0, 4, size=(31, 40), dtype=np.uint8)
    raw[5, :] = 0  # one row without ink
    ink = (False, True, False, True)
    expected = inventory_scanlines(raw, ink)
    for chunk in (1, 3, 7, 16, 39, 40, 41):
        assert inventory_scanlines(raw, ink, chunk_cols=chunk) == expected


def test_merge_extents_is_commutative():
    a = ScanlineExtent(4, 6)
    b = ScanlineExtent(1, 5)
    assert merge_extents(a, b) == merge_extents(b, a) == ScanlineExtent(1, 6)
    assert merge_extents(None, a) == merge_extents(a, None) == a
    assert merge_extents(None, None) is None


def test_render_adds_white_border():
    raw = np.ones((2, 4), dtype=np.uint8)
    region = ImageRegion(x=range(0, 4), y=range(0, 2))
    image = render_region(raw, INK_SLOT_1, region, border=3)

    assert image.size == (10, 8)
    assert image.mode == "L"
    pixels = np.asarray(image)
    interior = pixels[3:5, 3:7]
    assert (interior == INK).all()
    mask = np.ones_like(pixels, dtype=bool)
    mask[3:5, 3:7] = False
    assert (pixels[mask] == BACKGROUND).all()


def test_render_maps_local_to_global_pixels():
    raw = np.array([
        [0, 0, 0, 0],
        [0, 1, 0, 0],
        [0, 0, 1, 0],
    ], dtype=np.uint8)
    region = ImageRegion(x=range(1, 3), y=range(1, 3))
    pixels = np.asarray(render_region(raw, INK_SLOT_1, region, border=0))
    assert pixels.tolist() == [[INK, BACKGROUND], [BACKGROUND, INK]]


def test_preprocessor_splits_lines_top_to_bottom(make_event, palette):
    event = make_event([
        [0, 0, 0, 0, 0, 0],
        [0, 1, 1, 0, 0, 0],
        [0, 1, 0, 0, 0, 0],
        [0, 0, 0, 0, 0, 0],
        [0, 0, 0, 1, 1, 1],
    ])
    preprocessor = ImagePreprocessor(palette, AppSettings(ocr_border=2))
    ink, regions = preprocessor.segment(event)

    assert ink == INK_SLOT_1
    assert regions == [
        ImageRegion(x=range(1, 3), y=range(1, 3)),
        ImageRegion(x=range(3, 6), y=range(4, 5)),
    ]
    images = preprocessor.preprocess(event)
    assert [img.size for img in images] == [(6, 6), (7, 5)]


def test_transparent_event_is_skipped(make_event, palette):
    blank = make_event([[1, 1], [1, 1]], slot_alpha=(15, 0, 15, 15))
    text = make_event([[1, 0], [0, 0]], start=5.0, end=6.0)
    result = preprocess_subtitles([blank, text], palette, AppSettings(), max_workers=1)

    assert len(result) == 1
    assert result[0].time_span.start_ms == 5000
    assert len(result[0].images) == 1


def test_threshold_one_yields_no_regions(make_event, palette):
    event = make_event([[1, 2, 3], [3, 2, 1]])
    preprocessor = ImagePreprocessor(palette, AppSettings(ocr_threshold=1.0))
    assert preprocessor.preprocess(event) == []


@pytest.mark.parametrize("workers", [1, 2, 8])
def test_preprocess_keeps_event_order(make_event, palette, workers):
    events = [
        make_event([[1] * (i + 1)], start=float(i), end=float(i) + 0.5) for i in range(12)
    ]
    result = preprocess_subtitles(events, palette, AppSettings(ocr_border=0), max_workers=workers)
    assert [sub.time_span.start_ms for sub in result] == [i * 1000 for i in range(12)]
    assert [sub.images[0].width for sub in result] == list(range(1, 13))
