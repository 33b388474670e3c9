"""Per-property media storage on the local filesystem."""

from estate360.uploads.manager import (
    IMAGE_KEY_PATTERN,
    VIDEO_KEY_PATTERN,
    UploadBatchResult,
    UploadManager,
)

__all__ = [
    "IMAGE_KEY_PATTERN",
    "UploadBatchResult",
    "UploadManager",
    "VIDEO_KEY_PATTERN",
]
