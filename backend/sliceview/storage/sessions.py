from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import secrets
import threading

from sliceview.core.errors import (
    PreviewNotFoundError,
    SegmentNotFoundError,
    SessionNotFoundError,
)
from sliceview.services.packaging import Segment
from sliceview.services.processing import SegmentationResult


LOGGER = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SegmentSession:
    session_id: str
    result: SegmentationResult | None = None
    # preview handle -> segment index
    previews: dict[str, int] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


class InMemorySessionStore:
    """
    Single-process owner of the "current segments" of each session.
    Replacing or resetting a session drops its segment set and revokes every
    preview handle issued for it.
    Replace with Redis/Postgres for multi-worker / multi-instance deployments.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._data: dict[str, SegmentSession] = {}
        self._handles: dict[str, str] = {}  # preview handle -> session id

    def create(self, session_id: str) -> SegmentSession:
        with self._lock:
            if session_id in self._data:
                self._release_locked(self._data[session_id])
            session = SegmentSession(session_id=session_id)
            self._data[session_id] = session
            return session

    def get(self, session_id: str) -> SegmentSession:
        with self._lock:
            session = self._data.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            return session

    def replace(self, session_id: str, result: SegmentationResult) -> SegmentSession:
        with self._lock:
            session = self._data.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._release_locked(session)
            session.result = result
            for segment in result.segments:
                handle = secrets.token_urlsafe(16)
                session.previews[handle] = segment.index
                self._handles[handle] = session_id
            session.updated_at = utcnow()
            return session

    def clear(self, session_id: str) -> SegmentSession:
        """Discard the current segment set but keep the session itself."""
        with self._lock:
            session = self._data.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._release_locked(session)
            session.result = None
            session.updated_at = utcnow()
            return session

    def delete(self, session_id: str) -> None:
        with self._lock:
            session = self._data.pop(session_id, None)
            if session is None:
                raise SessionNotFoundError(session_id)
            self._release_locked(session)

    def segment(self, session_id: str, index: int) -> tuple[SegmentationResult, Segment]:
        session = self.get(session_id)
        result = session.result
        segment = result.segment(index) if result is not None else None
        if result is None or segment is None:
            raise SegmentNotFoundError(f"{session_id}/{index}")
        return result, segment

    def preview_handles(self, session_id: str) -> dict[int, str]:
        """segment index -> live preview handle"""
        with self._lock:
            session = self._data.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            return {idx: handle for handle, idx in session.previews.items()}

    def resolve_preview(self, session_id: str, handle: str) -> Segment:
        with self._lock:
            if self._handles.get(handle) != session_id:
                raise PreviewNotFoundError(handle)
            session = self._data[session_id]
            index = session.previews[handle]
            result = session.result
        segment = result.segment(index) if result is not None else None
        if segment is None:
            raise PreviewNotFoundError(handle)
        return segment

    def live_handle_count(self) -> int:
        with self._lock:
            return len(self._handles)

    def _release_locked(self, session: SegmentSession) -> None:
        if session.previews:
            LOGGER.debug("Releasing %d preview handle(s) for %s", len(session.previews), session.session_id)
        for handle in session.previews:
            self._handles.pop(handle, None)
        session.previews.clear()
