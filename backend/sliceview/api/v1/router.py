from __future__ import annotations

from fastapi import APIRouter

from sliceview.api.v1.segments import router as segments_router


api_router = APIRouter()
api_router.include_router(segments_router, tags=["segments"])
