"""Tests for strip rendering."""

from __future__ import annotations

import pytest

from sliceview.services.rendering import render_tile
from sliceview.services.tiling import TileRect, compute_tiles


def test_render_tile_crops_exact_rows(row_image) -> None:
    img = row_image(6, 200)
    strip = render_tile(img, TileRect(index=2, y_offset=70, height=40))

    assert strip.size == (6, 40)
    assert strip.getpixel((0, 0)) == 70
    assert strip.getpixel((5, 39)) == 109


def test_render_tiles_cover_source_rows(row_image) -> None:
    img = row_image(3, 250)
    for tile in compute_tiles(3, 250, max_dimension=100, overlap=10):
        strip = render_tile(img, tile)
        assert strip.size == (3, tile.height)
        assert [strip.getpixel((1, r)) for r in range(tile.height)] == [
            y % 256 for y in range(tile.y_offset, tile.bottom)
        ]


def test_render_tile_does_not_touch_source(row_image) -> None:
    img = row_image(4, 20)
    before = img.tobytes()
    strip = render_tile(img, TileRect(index=1, y_offset=0, height=10))
    strip.putpixel((0, 0), 255)

    assert img.tobytes() == before


def test_render_tile_rejects_out_of_bounds(row_image) -> None:
    img = row_image(4, 20)
    with pytest.raises(ValueError):
        render_tile(img, TileRect(index=1, y_offset=15, height=10))
