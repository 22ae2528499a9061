from __future__ import annotations

from dataclasses import dataclass
from PIL import Image

from sliceview.core.errors import InvalidDimensionsError


@dataclass(frozen=True)
class ScaledDimensions:
    width: int
    height: int
    original_width: int
    original_height: int

    @property
    def was_scaled(self) -> bool:
        return (self.width, self.height) != (self.original_width, self.original_height)


def scale_dimensions(width: int, height: int, max_dimension: int) -> ScaledDimensions:
    """
    Fit the width within max_dimension, preserving aspect ratio.
    Height is deliberately left unbounded; tall results are handled by tiling.
    """
    if width <= 0 or height <= 0:
        raise InvalidDimensionsError(f"Image dimensions must be positive, got {width}x{height}")

    if width <= max_dimension:
        return ScaledDimensions(width, height, width, height)

    scale = max_dimension / float(width)
    # round() is banker's rounding; match half-up rounding of the pixel math.
    scaled_height = max(1, int(height * scale + 0.5))
    return ScaledDimensions(max_dimension, scaled_height, width, height)


def scale_image(image: Image.Image, dims: ScaledDimensions) -> Image.Image:
    if not dims.was_scaled:
        return image
    return image.resize((dims.width, dims.height), Image.LANCZOS)
