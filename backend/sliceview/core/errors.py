from __future__ import annotations


class SegmentationError(Exception):
    pass


class InvalidDimensionsError(SegmentationError, ValueError):
    pass


class InvalidConfigurationError(SegmentationError, ValueError):
    pass


class UnsupportedImageError(SegmentationError, ValueError):
    pass


class EncodingFailedError(SegmentationError):
    def __init__(self, segment_index: int, message: str):
        super().__init__(f"Encoding segment {segment_index} failed: {message}")
        self.segment_index = segment_index


class ArchiveGenerationFailedError(SegmentationError):
    pass


class SessionNotFoundError(KeyError):
    pass


class SegmentNotFoundError(KeyError):
    pass


class PreviewNotFoundError(KeyError):
    pass
