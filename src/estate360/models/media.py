"""Uploaded media models."""

from dataclasses import dataclass
from enum import StrEnum


class MediaKind(StrEnum):
    """Coarse classification of an uploaded file."""

    IMAGE = "image"
    VIDEO = "video"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class UploadedFile:
    """A raw file blob received from a client."""

    filename: str
    data: bytes
    content_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)
