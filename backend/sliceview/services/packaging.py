from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from io import BytesIO
from typing import Sequence

from sliceview.core.errors import ArchiveGenerationFailedError
from sliceview.services.encoding import PNG_EXTENSION, PNG_MEDIA_TYPE


LOGGER = logging.getLogger(__name__)

ZIP_MEDIA_TYPE = "application/zip"
ZIP_EXTENSION = "zip"
# Fixed entry timestamp (earliest ZIP date) so the same segments give the same bytes.
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class Segment:
    index: int
    y_offset: int
    width: int
    height: int
    encoded_payload: bytes

    @property
    def byte_size(self) -> int:
        return len(self.encoded_payload)

    @property
    def size_kb(self) -> float:
        return round(self.byte_size / 1024, 1)


@dataclass(frozen=True)
class NamedPayload:
    filename: str
    media_type: str
    content: bytes


def segment_filename(base_name: str, index: int) -> str:
    return f"{base_name}_segment_{index}.{PNG_EXTENSION}"


def archive_filename(base_name: str) -> str:
    return f"{base_name}_segments.{ZIP_EXTENSION}"


def download_one(base_name: str, segment: Segment) -> NamedPayload:
    return NamedPayload(
        filename=segment_filename(base_name, segment.index),
        media_type=PNG_MEDIA_TYPE,
        content=segment.encoded_payload,
    )


def to_zip_bytes(base_name: str, segments: Sequence[Segment]) -> bytes:
    """
    Build a ZIP with one `{base}_segment_{i}.png` entry per segment, in index order.
    Output depends only on the inputs.
    """
    bio = BytesIO()
    try:
        with zipfile.ZipFile(bio, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
            for segment in sorted(segments, key=lambda s: s.index):
                info = zipfile.ZipInfo(segment_filename(base_name, segment.index), date_time=_ZIP_EPOCH)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                zf.writestr(info, segment.encoded_payload)
    except (OSError, ValueError, zipfile.LargeZipFile, MemoryError) as e:
        LOGGER.exception("Archive assembly failed for %s", base_name)
        raise ArchiveGenerationFailedError(f"Could not build archive: {e}") from e
    return bio.getvalue()


def download_all(base_name: str, segments: Sequence[Segment]) -> NamedPayload:
    return NamedPayload(
        filename=archive_filename(base_name),
        media_type=ZIP_MEDIA_TYPE,
        content=to_zip_bytes(base_name, segments),
    )
