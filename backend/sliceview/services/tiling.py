from __future__ import annotations

from dataclasses import dataclass

from sliceview.core.errors import InvalidConfigurationError, InvalidDimensionsError


@dataclass(frozen=True)
class TileRect:
    index: int
    y_offset: int
    height: int

    @property
    def bottom(self) -> int:
        return self.y_offset + self.height


def compute_tiles(
    scaled_width: int,
    scaled_height: int,
    *,
    max_dimension: int = 1568,
    overlap: int = 50,
) -> list[TileRect]:
    """
    Split a scaled image into full-width horizontal strips:
    - every strip is at most max_dimension tall
    - consecutive strips share `overlap` rows (stride = max_dimension - overlap)
    - no trailing strip is started within `overlap` rows of the bottom, since the
      previous strip already reaches the end there
    Indices are 1-based, top to bottom.
    """
    if scaled_width <= 0 or scaled_height <= 0:
        raise InvalidDimensionsError(
            f"Scaled dimensions must be positive, got {scaled_width}x{scaled_height}"
        )
    if max_dimension <= 0 or overlap <= 0 or overlap >= max_dimension:
        raise InvalidConfigurationError(
            f"Need 0 < overlap < max_dimension, got overlap={overlap}, max_dimension={max_dimension}"
        )

    if scaled_height <= max_dimension:
        return [TileRect(index=1, y_offset=0, height=scaled_height)]

    stride = max_dimension - overlap
    tiles: list[TileRect] = []

    y = 0
    index = 1
    while y < scaled_height:
        height = min(max_dimension, scaled_height - y)
        tiles.append(TileRect(index=index, y_offset=y, height=height))

        y += stride
        index += 1

        if scaled_height - overlap <= y < scaled_height:
            break

    return tiles


def tile_count(scaled_height: int, *, max_dimension: int, overlap: int) -> int:
    """
    Number of strips compute_tiles() emits, without building them:
    ceil((H - overlap) / stride), which already accounts for the sliver rule.
    """
    if scaled_height <= max_dimension:
        return 1
    stride = max_dimension - overlap
    return -(-(scaled_height - overlap) // stride)
