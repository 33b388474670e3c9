"""Classification of uploaded files as image or video."""

from pathlib import PurePosixPath
from typing import Final

from estate360.models import MediaKind

IMAGE_EXTENSIONS: Final = frozenset(
    {".jpg", ".jpeg", ".png", ".gif", ".webp", ".avif", ".heic", ".heif", ".bmp", ".tif", ".tiff"}
)
VIDEO_EXTENSIONS: Final = frozenset(
    {".mp4", ".mov", ".m4v", ".webm", ".avi", ".mkv", ".3gp", ".mpeg", ".mpg", ".ogv"}
)

DEFAULT_VIDEO_SIZE_HINT: Final = 1024 * 1024


def classify_media(
    content_type: str | None,
    filename: str | None,
    size: int,
    *,
    video_size_hint: int = DEFAULT_VIDEO_SIZE_HINT,
) -> MediaKind:
    """Classify a file by MIME prefix, then extension, then size.

    Browsers sometimes send an empty or generic MIME type (e.g.
    ``application/octet-stream`` for .mov files), so the extension is
    consulted next. As a last resort anything larger than ``video_size_hint``
    is assumed to be video. The result is informational only.

    Args:
        content_type: MIME type reported by the client, if any.
        filename: Original filename.
        size: Size in bytes.
        video_size_hint: Size above which an unrecognised file counts as video.

    Returns:
        The inferred media kind.
    """
    mime = (content_type or "").lower().strip()
    if mime.startswith("image/"):
        return MediaKind.IMAGE
    if mime.startswith("video/"):
        return MediaKind.VIDEO

    suffix = PurePosixPath((filename or "").lower()).suffix
    if suffix in IMAGE_EXTENSIONS:
        return MediaKind.IMAGE
    if suffix in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO

    if size > video_size_hint:
        return MediaKind.VIDEO
    return MediaKind.UNKNOWN
