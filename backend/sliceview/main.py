from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from PIL import Image

from sliceview.core.config import SegmentationConfig, settings
from sliceview.api.v1.router import api_router


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    # Fail at startup on bad MAX_DIMENSION / SEGMENT_OVERLAP rather than on first upload.
    SegmentationConfig.from_settings(settings)
    # Pillow's own decompression-bomb guard is process-wide; set it once here.
    # decode_image() enforces the exact limit per upload.
    Image.MAX_IMAGE_PIXELS = settings.max_image_pixels

    app = FastAPI(title=settings.app_name)

    allow_credentials = True
    if settings.cors_allow_origins == ["*"]:
        # Starlette disallows allow_credentials=True with wildcard origins.
        allow_credentials = False

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(api_router, prefix=settings.api_v1_prefix)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
