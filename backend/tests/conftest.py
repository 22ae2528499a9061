from __future__ import annotations

from io import BytesIO
from typing import Callable

import pytest
from PIL import Image


def _row_image(width: int, height: int) -> Image.Image:
    # row y is filled with y % 256
    data = bytes((y % 256) for y in range(height) for _ in range(width))
    return Image.frombytes("L", (width, height), data)


def _png_bytes(img: Image.Image, fmt: str = "PNG") -> bytes:
    bio = BytesIO()
    img.save(bio, format=fmt)
    return bio.getvalue()


@pytest.fixture
def row_image() -> Callable[[int, int], Image.Image]:
    return _row_image


@pytest.fixture
def image_bytes() -> Callable[..., bytes]:
    return _png_bytes
