"""Tests for PNG encoding fan-out."""

from __future__ import annotations

import threading
import time
from io import BytesIO

import pytest
from PIL import Image

from sliceview.core.errors import EncodingFailedError
from sliceview.services.encoding import encode_all, encode_png


def test_encode_png_is_lossless() -> None:
    img = Image.new("RGB", (5, 4), (10, 20, 30))
    data = encode_png(img, compress_level=9)

    assert data.startswith(b"\x89PNG\r\n\x1a\n")
    decoded = Image.open(BytesIO(data))
    assert decoded.size == (5, 4)
    assert decoded.convert("RGB").tobytes() == img.tobytes()


@pytest.mark.asyncio
async def test_encode_all_preserves_order() -> None:
    images = [Image.new("L", (3, h), h) for h in (5, 1, 9, 2)]

    payloads = await encode_all(images, concurrency=2)

    sizes = [Image.open(BytesIO(p)).size for p in payloads]
    assert sizes == [(3, 5), (3, 1), (3, 9), (3, 2)]


@pytest.mark.asyncio
async def test_encode_all_empty() -> None:
    assert await encode_all([]) == []


@pytest.mark.asyncio
async def test_encode_all_failure_is_atomic() -> None:
    images = [Image.new("L", (3, h)) for h in (4, 5, 6, 7)]

    def flaky(img: Image.Image, *, compress_level: int) -> bytes:
        if img.height == 6:
            raise OSError("out of memory")
        return encode_png(img, compress_level=compress_level)

    with pytest.raises(EncodingFailedError) as excinfo:
        await encode_all(images, encoder=flaky)

    assert excinfo.value.segment_index == 3
    assert "out of memory" in str(excinfo.value)


@pytest.mark.asyncio
async def test_encode_all_limits_concurrency() -> None:
    lock = threading.Lock()
    active = 0
    peak = 0

    def slow(img: Image.Image, *, compress_level: int) -> bytes:
        nonlocal active, peak
        with lock:
            active += 1
            peak = max(peak, active)
        time.sleep(0.02)
        with lock:
            active -= 1
        return b"x"

    payloads = await encode_all([Image.new("L", (1, 1))] * 6, concurrency=2, encoder=slow)

    assert payloads == [b"x"] * 6
    assert 1 <= peak <= 2
