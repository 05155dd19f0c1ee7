# tests/test_palette.py
import numpy as np
import pytest

from subocr_core.subtitles.preprocessing.palette import (
    NO_SLOTS,
    binarize_palette,
    generate_visibility_palette,
    merge_visibility,
    rgb_palette_to_luminance,
    srgb_to_linear,
)


def test_luminance_of_black_white_and_primaries(palette):
    lum = rgb_palette_to_luminance(palette)
    assert len(lum) == 16
    assert lum[0] == 0.0
    assert lum[1] == pytest.approx(1.0)
    assert lum[4] == pytest.approx(0.2126)  # red
    assert lum[5] == pytest.approx(0.7152)  # green
    assert lum[6] == pytest.approx(0.0722)  # blue


def test_srgb_curve_has_linear_toe():
    assert srgb_to_linear(10) == pytest.approx(10 / 255 / 12.92)
    assert srgb_to_linear(128) == pytest.approx(((128 / 255 + 0.055) / 1.055) ** 2.4)


def test_visibility_reads_alpha_reversed():
    raw = np.array([[0, 1], [1, 3]], dtype=np.uint8)
    # stored alpha: slot 3 first, slot 0 last
    stored_alpha = (15, 15, 15, 0)
    assert generate_visibility_palette(raw, stored_alpha) == (False, True, False, True)


def test_zero_alpha_hides_used_slot():
    raw = np.array([[2, 2, 2]], dtype=np.uint8)
    assert generate_visibility_palette(raw, (15, 0, 15, 15)) == NO_SLOTS


def test_partial_alpha_counts_as_visible():
    raw = np.array([[1]], dtype=np.uint8)
    assert generate_visibility_palette(raw, (0, 0, 3, 0)) == (False, True, False, False)


def test_visibility_identical_for_any_row_chunking():
    rng = np.random.default_rng(7)
    raw = rng.integers(0, 3, size=(23, 17), dtype=np.uint8)
    raw[11, 5] = 3
    alpha = (15, 8, 15, 15)
    expected = generate_visibility_palette(raw, alpha)
    for chunk in (1, 2, 5, 22, 23, 100):
        assert generate_visibility_palette(raw, alpha, chunk_rows=chunk) == expected


def test_merge_visibility_is_commutative():
    a = (True, False, False, True)
    b = (False, False, True, True)
    assert merge_visibility(a, b) == merge_visibility(b, a) == (True, False, True, True)
    assert merge_visibility(NO_SLOTS, a) == a


def test_binarize_maps_slots_through_reversed_palette(palette):
    lum = rgb_palette_to_luminance(palette)
    # slot 0 -> black, slot 1 -> white, slot 2 -> dark gray (16,16,16), slot 3 -> unused
    stored_palette = (0, 3, 1, 0)
    visible = (True, True, True, False)
    assert binarize_palette(lum, stored_palette, visible, 0.6) == (False, True, False, False)


def test_threshold_one_never_produces_ink(palette):
    lum = rgb_palette_to_luminance(palette)
    assert binarize_palette(lum, (1, 1, 1, 1), (True,) * 4, 1.0) == NO_SLOTS


def test_threshold_zero_inks_every_lit_visible_slot(palette):
    lum = rgb_palette_to_luminance(palette)
    stored_palette = (0, 2, 3, 1)  # slots: white, dark gray, gray, black
    visible = (True, True, True, True)
    assert binarize_palette(lum, stored_palette, visible, 0.0) == (True, True, True, False)


def test_invisible_slots_are_background(palette):
    lum = rgb_palette_to_luminance(palette)
    assert binarize_palette(lum, (1, 1, 1, 1), (False, True, False, False), 0.5) == (
        False, True, False, False
    )


def test_only_black_visible_is_blank(palette):
    lum = rgb_palette_to_luminance(palette)
    assert binarize_palette(lum, (0, 0, 1, 0), (True, False, True, True), 0.0) == NO_SLOTS


def test_nothing_visible_is_blank(palette):
    lum = rgb_palette_to_luminance(palette)
    assert binarize_palette(lum, (1, 1, 1, 1), NO_SLOTS, 0.0) == NO_SLOTS
