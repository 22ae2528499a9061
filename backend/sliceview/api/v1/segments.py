from __future__ import annotations

import logging
import re
from urllib.parse import quote

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response

from sliceview.core.config import SegmentationConfig, settings
from sliceview.core.errors import (
    ArchiveGenerationFailedError,
    EncodingFailedError,
    InvalidDimensionsError,
    PreviewNotFoundError,
    SegmentNotFoundError,
    SessionNotFoundError,
    UnsupportedImageError,
)
from sliceview.schemas.segments import DimensionsInfo, SegmentationResponse, SegmentInfo
from sliceview.services.encoding import PNG_MEDIA_TYPE
from sliceview.services.packaging import NamedPayload, archive_filename, download_all, download_one, segment_filename
from sliceview.services.processing import SegmentationPipeline, new_session_id
from sliceview.storage.sessions import InMemorySessionStore, SegmentSession


LOGGER = logging.getLogger(__name__)

router = APIRouter()

_sessions = InMemorySessionStore()
_pipeline = SegmentationPipeline(config=SegmentationConfig.from_settings(settings))


def _session_url(session_id: str) -> str:
    return f"{settings.api_v1_prefix}/sessions/{session_id}"


def _to_response(session: SegmentSession) -> SegmentationResponse:
    result = session.result
    if result is None:
        return SegmentationResponse(session_id=session.session_id, updated_at=session.updated_at)

    base_url = _session_url(session.session_id)
    handles = _sessions.preview_handles(session.session_id)
    dims = result.dimensions
    return SegmentationResponse(
        session_id=session.session_id,
        base_name=result.base_name,
        dimensions=DimensionsInfo(
            original_width=dims.original_width,
            original_height=dims.original_height,
            scaled_width=dims.width,
            scaled_height=dims.height,
            was_scaled=dims.was_scaled,
            summary=result.dimensions_summary,
        ),
        segment_count=result.segment_count,
        summary=result.segments_summary,
        archive_available=result.archive_available,
        archive_filename=archive_filename(result.base_name),
        archive_url=f"{base_url}/archive",
        segments=[
            SegmentInfo(
                index=s.index,
                y_offset=s.y_offset,
                width=s.width,
                height=s.height,
                byte_size=s.byte_size,
                size_kb=s.size_kb,
                filename=segment_filename(result.base_name, s.index),
                download_url=f"{base_url}/segments/{s.index}",
                preview_url=f"{base_url}/previews/{handles[s.index]}" if s.index in handles else None,
            )
            for s in result.segments
        ],
        updated_at=session.updated_at,
    )


def _content_disposition(filename: str) -> str:
    quoted = quote(filename, safe="")
    if quoted == filename:
        return f'attachment; filename="{filename}"'
    # Header values are latin-1; non-ASCII names go in the RFC 5987 parameter.
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quoted}"


def _attachment(payload: NamedPayload) -> Response:
    headers = {"Content-Disposition": _content_disposition(payload.filename)}
    return Response(content=payload.content, media_type=payload.media_type, headers=headers)


async def _read_upload(file: UploadFile) -> bytes:
    content_type = (file.content_type or "").lower()
    if content_type and not content_type.startswith("image/") and content_type != "application/octet-stream":
        raise HTTPException(status_code=400, detail="Please select an image file.")
    data = await file.read()
    if len(data) > settings.max_upload_mb * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"Image exceeds {settings.max_upload_mb} MB upload limit.")
    return data


async def _process_into(session_id: str, file: UploadFile) -> SegmentSession:
    # Drop the previous set (and its preview handles) before anything can fail.
    _sessions.clear(session_id)
    image_bytes = await _read_upload(file)
    try:
        result = await _pipeline.segment_upload(
            image_bytes,
            filename=file.filename,
            max_pixels=settings.max_image_pixels,
        )
    except (UnsupportedImageError, InvalidDimensionsError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EncodingFailedError as e:
        LOGGER.warning("Segmentation failed for %s: %s", file.filename, e)
        raise HTTPException(status_code=500, detail=str(e))
    return _sessions.replace(session_id, result)


def _get_session(session_id: str) -> SegmentSession:
    try:
        return _sessions.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found.")


@router.post("/sessions", response_model=SegmentationResponse)
async def create_session(file: UploadFile = File(...)):
    session_id = new_session_id()
    _sessions.create(session_id)
    try:
        session = await _process_into(session_id, file)
    except Exception:
        _sessions.delete(session_id)
        raise
    return _to_response(session)


@router.put("/sessions/{session_id}", response_model=SegmentationResponse)
async def replace_session(session_id: str, file: UploadFile = File(...)):
    _get_session(session_id)
    session = await _process_into(session_id, file)
    return _to_response(session)


@router.get("/sessions/{session_id}", response_model=SegmentationResponse)
async def get_session(session_id: str):
    return _to_response(_get_session(session_id))


@router.delete("/sessions/{session_id}", status_code=204)
async def reset_session(session_id: str):
    try:
        _sessions.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Session not found.")
    LOGGER.info("Reset session %s; %d preview handle(s) live", session_id, _sessions.live_handle_count())
    return Response(status_code=204)


@router.get("/sessions/{session_id}/segments/{index}")
async def download_segment(session_id: str, index: int):
    if index < 1:
        raise HTTPException(status_code=400, detail="index must be >= 1")
    _get_session(session_id)
    try:
        result, segment = _sessions.segment(session_id, index)
    except SegmentNotFoundError:
        raise HTTPException(status_code=404, detail="Segment not found.")
    return _attachment(download_one(result.base_name, segment))


@router.get("/sessions/{session_id}/archive")
async def download_archive(session_id: str):
    result = _get_session(session_id).result
    if result is None:
        raise HTTPException(status_code=409, detail="No processed image in this session.")
    try:
        payload = download_all(result.base_name, result.segments)
    except ArchiveGenerationFailedError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return _attachment(payload)


@router.get("/sessions/{session_id}/previews/{handle}")
async def get_preview(session_id: str, handle: str):
    try:
        segment = _sessions.resolve_preview(session_id, handle)
    except PreviewNotFoundError:
        raise HTTPException(status_code=404, detail="Preview not found.")
    return Response(content=segment.encoded_payload, media_type=PNG_MEDIA_TYPE)
