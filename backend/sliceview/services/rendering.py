from __future__ import annotations

from PIL import Image

from sliceview.services.tiling import TileRect


def render_tile(scaled_image: Image.Image, tile: TileRect) -> Image.Image:
    """
    Crop one full-width strip out of the already-scaled image (1:1, no resampling).
    The returned image owns its own pixel buffer.
    """
    width, height = scaled_image.size
    if tile.y_offset < 0 or tile.bottom > height:
        raise ValueError(
            f"Tile {tile.index} rows [{tile.y_offset}, {tile.bottom}) fall outside image height {height}"
        )
    strip = scaled_image.crop((0, tile.y_offset, width, tile.bottom))
    strip.load()
    return strip
