"""Tests for the width-bounding scaler."""

from __future__ import annotations

import pytest
from PIL import Image

from sliceview.core.errors import InvalidDimensionsError
from sliceview.services.scaling import scale_dimensions, scale_image


@pytest.mark.parametrize("width,height", [(1, 1), (800, 600), (1568, 90000), (1000, 4000)])
def test_scale_is_identity_within_limit(width: int, height: int) -> None:
    dims = scale_dimensions(width, height, 1568)

    assert (dims.width, dims.height) == (width, height)
    assert not dims.was_scaled


def test_scale_wide_image_fits_width() -> None:
    dims = scale_dimensions(3000, 1000, 1568)

    assert (dims.width, dims.height) == (1568, 523)
    assert (dims.original_width, dims.original_height) == (3000, 1000)
    assert dims.was_scaled


@pytest.mark.parametrize("width,height", [(1569, 1), (2000, 2000), (4000, 30000), (3137, 7)])
def test_scale_bound_matches_rounded_ratio(width: int, height: int) -> None:
    dims = scale_dimensions(width, height, 1568)

    assert dims.width == 1568
    assert abs(dims.height - height * 1568 / width) <= 0.5


def test_scale_rounds_half_up() -> None:
    # 3 * 2 / 4 = 1.5
    assert scale_dimensions(4, 3, 2).height == 2


def test_scale_keeps_tall_narrow_images_tall() -> None:
    dims = scale_dimensions(2000, 20000, 1568)

    assert dims.height > 1568


@pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-5, 10)])
def test_scale_rejects_non_positive_dimensions(width: int, height: int) -> None:
    with pytest.raises(InvalidDimensionsError):
        scale_dimensions(width, height, 1568)


def test_scale_image_resizes_only_when_needed() -> None:
    small = Image.new("RGB", (40, 30))
    assert scale_image(small, scale_dimensions(40, 30, 64)) is small

    wide = Image.new("RGB", (128, 30))
    resized = scale_image(wide, scale_dimensions(128, 30, 64))
    assert resized.size == (64, 15)
