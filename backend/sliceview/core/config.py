from __future__ import annotations

from dataclasses import dataclass
from pydantic import BaseModel
from dotenv import load_dotenv
import os

from sliceview.core.errors import InvalidConfigurationError


load_dotenv()


class Settings(BaseModel):
    app_name: str = os.getenv("APP_NAME", "sliceview-backend")
    api_v1_prefix: str = "/api/v1"
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Input-size limit of the downstream image-understanding API.
    max_dimension: int = int(os.getenv("MAX_DIMENSION", "1568"))
    # Rows shared by vertically adjacent segments.
    segment_overlap: int = int(os.getenv("SEGMENT_OVERLAP", "50"))

    # zlib level for PNG writes (0 = fastest/largest, 9 = slowest/smallest).
    png_compress_level: int = int(os.getenv("PNG_COMPRESS_LEVEL", "6"))
    # Worker threads used to encode segments of a single image.
    encode_concurrency: int = int(os.getenv("ENCODE_CONCURRENCY", "4"))

    max_upload_mb: int = int(os.getenv("MAX_UPLOAD_MB", "50"))
    # Pillow decompression-bomb guard.
    max_image_pixels: int = int(os.getenv("MAX_IMAGE_PIXELS", "200000000"))

    # Comma-separated list of allowed origins, e.g.:
    #   CORS_ALLOW_ORIGINS=https://slices.example.com,http://localhost:5173
    cors_allow_origins: list[str] = (
        [o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")]
        if os.getenv("CORS_ALLOW_ORIGINS")
        else ["*"]
    )


settings = Settings()


@dataclass(frozen=True)
class SegmentationConfig:
    """
    Validated tuning constants for one segmentation pipeline.
    Raises InvalidConfigurationError on construction so a bad setup fails
    before any image is processed.
    """

    max_dimension: int = 1568
    overlap: int = 50
    png_compress_level: int = 6
    encode_concurrency: int = 4

    def __post_init__(self) -> None:
        if self.max_dimension <= 0:
            raise InvalidConfigurationError(f"max_dimension must be positive, got {self.max_dimension}")
        if self.overlap <= 0:
            raise InvalidConfigurationError(f"overlap must be positive, got {self.overlap}")
        if self.overlap >= self.max_dimension:
            raise InvalidConfigurationError(
                f"overlap ({self.overlap}) must be smaller than max_dimension ({self.max_dimension})"
            )
        if not 0 <= self.png_compress_level <= 9:
            raise InvalidConfigurationError(
                f"png_compress_level must be within 0..9, got {self.png_compress_level}"
            )
        if self.encode_concurrency <= 0:
            raise InvalidConfigurationError(
                f"encode_concurrency must be positive, got {self.encode_concurrency}"
            )

    @property
    def stride(self) -> int:
        return self.max_dimension - self.overlap

    @classmethod
    def from_settings(cls, s: Settings) -> "SegmentationConfig":
        return cls(
            max_dimension=s.max_dimension,
            overlap=s.segment_overlap,
            png_compress_level=s.png_compress_level,
            encode_concurrency=s.encode_concurrency,
        )
