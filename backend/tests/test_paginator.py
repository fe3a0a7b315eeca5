from __future__ import annotations

import math

import pytest

from indexintellect.export.paginator import (
    A4_HEIGHT_MM,
    DEFAULT_MARGIN_MM,
    paginate,
    scaled_image_height,
    usable_page_height,
)

USABLE = A4_HEIGHT_MM - 2 * DEFAULT_MARGIN_MM


@pytest.mark.parametrize("img_height", [1.0, 100.0, 276.9, 277.0, 277.5, 554.0, 831.0, 1000.0, 5000.3])
def test_page_count_is_ceiling_of_height_over_usable(img_height):
    placements = paginate(img_height)

    assert len(placements) == math.ceil(img_height / USABLE)


def test_zero_height_still_produces_one_page():
    placements = paginate(0.0)

    assert len(placements) == 1
    assert placements[0].band_bottom == 0.0


def test_image_exactly_one_usable_height_fits_on_one_page():
    placements = paginate(USABLE)

    assert len(placements) == 1
    assert placements[0].offset == DEFAULT_MARGIN_MM
    assert placements[0].band_top == 0.0
    assert placements[0].band_bottom == USABLE


def test_float_residue_does_not_open_an_empty_page():
    assert len(paginate(3 * USABLE + 1e-9)) == 3


def test_offsets_shift_by_one_usable_height_per_page():
    placements = paginate(1000.0)

    assert [p.page_index for p in placements] == [0, 1, 2, 3]
    assert placements[0].offset == DEFAULT_MARGIN_MM
    for previous, current in zip(placements, placements[1:]):
        assert current.offset == pytest.approx(previous.offset - USABLE)


def test_bands_cover_the_image_without_gaps_or_overlap():
    img_height = 1000.0
    placements = paginate(img_height)

    assert placements[0].band_top == 0.0
    for previous, current in zip(placements, placements[1:]):
        assert current.band_top == pytest.approx(previous.band_bottom)
        assert current.band_bottom - current.band_top <= USABLE + 1e-9
    assert placements[-1].band_bottom == pytest.approx(img_height)


def test_custom_page_geometry():
    placements = paginate(250.0, page_height=120.0, margin=10.0)

    assert len(placements) == 3
    assert placements[2].offset == pytest.approx(10.0 - 200.0)


def test_scaled_image_height_preserves_aspect_ratio():
    # 190mm wide content area on A4.
    assert scaled_image_height(1400, 2800, 210.0) == pytest.approx(380.0)


@pytest.mark.parametrize(
    "call",
    [
        lambda: paginate(-1.0),
        lambda: usable_page_height(20.0, margin=10.0),
        lambda: scaled_image_height(0, 100, 210.0),
        lambda: scaled_image_height(100, 100, 20.0, margin=10.0),
    ],
)
def test_invalid_geometry_is_rejected(call):
    with pytest.raises(ValueError):
        call()
