from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from uuid import uuid4

from PIL import Image

from sliceview.core.config import SegmentationConfig
from sliceview.services.encoding import encode_all
from sliceview.services.images import decode_image, derive_base_name
from sliceview.services.packaging import Segment
from sliceview.services.rendering import render_tile
from sliceview.services.scaling import ScaledDimensions, scale_dimensions, scale_image
from sliceview.services.tiling import compute_tiles, tile_count


LOGGER = logging.getLogger(__name__)


def new_session_id() -> str:
    return uuid4().hex


def describe_dimensions(dims: ScaledDimensions) -> str:
    text = f"{dims.original_width} × {dims.original_height} px"
    if dims.was_scaled:
        text += f" → scaled to {dims.width} × {dims.height} px"
    return text


def describe_segment_count(count: int) -> str:
    return f"{count} segment{'' if count == 1 else 's'} created"


@dataclass(frozen=True)
class SegmentationResult:
    base_name: str
    dimensions: ScaledDimensions
    segments: tuple[Segment, ...]

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    @property
    def archive_available(self) -> bool:
        # A single segment is its own download; offering a ZIP of it is pointless.
        return self.segment_count > 1

    @property
    def dimensions_summary(self) -> str:
        return describe_dimensions(self.dimensions)

    @property
    def segments_summary(self) -> str:
        return describe_segment_count(self.segment_count)

    def segment(self, index: int) -> Segment | None:
        if 1 <= index <= len(self.segments):
            return self.segments[index - 1]
        return None


class SegmentationPipeline:
    """
    Scale -> tile -> render -> encode (fan-out) -> join.
    Returns a fully encoded SegmentationResult or raises; never a partial set.
    """

    def __init__(self, *, config: SegmentationConfig):
        self.config = config

    async def segment_image(self, image: Image.Image, *, base_name: str) -> SegmentationResult:
        cfg = self.config
        original_width, original_height = image.size

        dims = scale_dimensions(original_width, original_height, cfg.max_dimension)
        scaled = await asyncio.to_thread(scale_image, image, dims)

        LOGGER.info(
            "Segmenting %s: %s, %d tile(s)",
            base_name,
            describe_dimensions(dims),
            tile_count(dims.height, max_dimension=cfg.max_dimension, overlap=cfg.overlap),
        )
        tiles = compute_tiles(
            dims.width,
            dims.height,
            max_dimension=cfg.max_dimension,
            overlap=cfg.overlap,
        )

        payloads = await encode_all(
            tiles,
            render=lambda tile: render_tile(scaled, tile),
            compress_level=cfg.png_compress_level,
            concurrency=cfg.encode_concurrency,
        )

        segments = tuple(
            Segment(
                index=tile.index,
                y_offset=tile.y_offset,
                width=dims.width,
                height=tile.height,
                encoded_payload=payload,
            )
            for tile, payload in zip(tiles, payloads)
        )
        return SegmentationResult(base_name=base_name, dimensions=dims, segments=segments)

    async def segment_upload(
        self,
        image_bytes: bytes,
        *,
        filename: str | None,
        max_pixels: int | None = None,
    ) -> SegmentationResult:
        image = await asyncio.to_thread(decode_image, image_bytes, max_pixels=max_pixels)
        return await self.segment_image(image, base_name=derive_base_name(filename))
