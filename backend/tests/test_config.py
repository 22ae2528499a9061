"""Tests for segmentation configuration validation."""

from __future__ import annotations

import pytest

from sliceview.core.config import SegmentationConfig, Settings
from sliceview.core.errors import InvalidConfigurationError


def test_defaults() -> None:
    cfg = SegmentationConfig()

    assert (cfg.max_dimension, cfg.overlap, cfg.stride) == (1568, 50, 1518)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_dimension": 0},
        {"overlap": 0},
        {"overlap": -3},
        {"max_dimension": 50, "overlap": 50},
        {"max_dimension": 40, "overlap": 50},
        {"png_compress_level": 10},
        {"encode_concurrency": 0},
    ],
)
def test_invalid_configuration_fails_at_construction(kwargs) -> None:
    with pytest.raises(InvalidConfigurationError):
        SegmentationConfig(**kwargs)


def test_from_settings() -> None:
    s = Settings(max_dimension=1000, segment_overlap=20, png_compress_level=1, encode_concurrency=2)
    cfg = SegmentationConfig.from_settings(s)

    assert cfg == SegmentationConfig(max_dimension=1000, overlap=20, png_compress_level=1, encode_concurrency=2)


def test_from_settings_rejects_bad_overlap() -> None:
    with pytest.raises(InvalidConfigurationError):
        SegmentationConfig.from_settings(Settings(max_dimension=100, segment_overlap=100))


def test_create_app_sets_pillow_pixel_limit(monkeypatch) -> None:
    from PIL import Image

    from sliceview import main as app_main

    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1)
    monkeypatch.setattr(app_main.settings, "max_image_pixels", 123_456_789)

    app_main.create_app()

    assert Image.MAX_IMAGE_PIXELS == 123_456_789
