"""Disk storage for uploaded property media.

Files live at ``{uploads_dir}/{property_id}/{key}-{ms}-{token}-{name}`` and
are addressed by ``{url_prefix}/{property_id}/{file}?t={ms}``.
"""

import asyncio
import re
import shutil
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final

from estate360.exceptions import InvalidInputError, StorageUnavailableError
from estate360.logging import get_logger
from estate360.models import MediaKind, UploadedFile
from estate360.utils.file_names import (
    build_stored_filename,
    cache_busted_url,
    is_safe_property_id,
    short_token,
)
from estate360.utils.media_type import DEFAULT_VIDEO_SIZE_HINT, classify_media

logger = get_logger(__name__)

IMAGE_KEY_PATTERN: Final = re.compile(r"^image-\d+$")
VIDEO_KEY_PATTERN: Final = re.compile(r"^video(?:-\d+)?$")

_MAX_NAME_ATTEMPTS: Final = 5


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class UploadBatchResult:
    """Outcome of storing a batch of keyed files.

    A batch succeeds even when some files fail; compare ``succeeded`` with
    ``attempted`` when all-or-nothing semantics matter.
    """

    images: list[str] = field(default_factory=list)
    videos: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    attempted: int = 0

    @property
    def succeeded(self) -> int:
        return len(self.images) + len(self.videos)

    @property
    def urls(self) -> list[str]:
        return [*self.images, *self.videos]

    @property
    def is_partial(self) -> bool:
        return self.succeeded < self.attempted

    def summary(self) -> dict[str, int]:
        return {"attempted": self.attempted, "succeeded": self.succeeded}


class UploadManager:
    """Turns uploaded blobs into stable, cache-busted public URLs."""

    def __init__(
        self,
        uploads_dir: str | Path,
        *,
        url_prefix: str = "/uploads",
        video_size_hint_bytes: int = DEFAULT_VIDEO_SIZE_HINT,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        """Initialize the upload manager.

        Args:
            uploads_dir: Root directory holding one folder per property.
            url_prefix: Public URL path that serves ``uploads_dir``.
            video_size_hint_bytes: Size above which unlabelled files count as video.
            clock: Millisecond timestamp source.
        """
        self.uploads_dir = Path(uploads_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.video_size_hint_bytes = video_size_hint_bytes
        self._clock = clock

    def property_dir(self, property_id: str) -> Path:
        """Directory holding a property's media."""
        return self.uploads_dir / property_id

    def _validated_id(self, property_id: str | None) -> str:
        cleaned = (property_id or "").strip()
        if not cleaned:
            raise InvalidInputError("A property id is required to store uploads")
        if not is_safe_property_id(cleaned):
            raise InvalidInputError(f"Property id {cleaned!r} is not usable as a directory name")
        return cleaned

    def ensure_property_dir(self, property_id: str) -> Path:
        """Create the uploads root and the property's folder if missing.

        Raises:
            StorageUnavailableError: If either directory cannot be created.
        """
        try:
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to create uploads directory {self.uploads_dir}: {e}"
            ) from e
        target = self.property_dir(property_id)
        try:
            target.mkdir(exist_ok=True)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to create upload directory for property {property_id}: {e}"
            ) from e
        return target

    def _probe_writable(self, directory: Path) -> None:
        """Write and delete a throwaway file to surface disk-full/permission faults early."""
        probe = directory / f".write-probe-{self._clock()}-{short_token()}.tmp"
        try:
            probe.write_bytes(b"probe")
            probe.unlink()
        except OSError as e:
            probe.unlink(missing_ok=True)
            raise StorageUnavailableError(
                f"Cannot write to {directory}; disk may be full or permissions wrong: {e}"
            ) from e

    def _write(self, property_id: str, file: UploadedFile, key_prefix: str) -> str:
        directory = self.ensure_property_dir(property_id)
        self._probe_writable(directory)

        timestamp = self._clock()
        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = build_stored_filename(file.filename, key_prefix, timestamp, short_token())
            target = directory / filename
            if not target.exists():
                break
        else:
            raise StorageUnavailableError(f"Could not find a free filename in {directory}")

        kind = classify_media(
            file.content_type,
            file.filename,
            file.size,
            video_size_hint=self.video_size_hint_bytes,
        )
        if kind is MediaKind.UNKNOWN:
            logger.warning(
                "upload_unrecognised_type",
                filename=file.filename,
                content_type=file.content_type,
                size=file.size,
            )

        try:
            with target.open("xb") as fh:
                fh.write(file.data)
        except OSError as e:
            raise StorageUnavailableError(
                f"Failed to write {file.filename!r} ({file.size} bytes) to {target}: {e}"
            ) from e

        url = cache_busted_url(self.url_prefix, property_id, filename, timestamp)
        logger.info(
            "upload_saved",
            property_id=property_id,
            key=key_prefix,
            filename=filename,
            size=file.size,
            kind=kind.value,
            url=url,
        )
        return url

    async def store(self, property_id: str, file: UploadedFile, key_prefix: str) -> str:
        """Write one uploaded file and return its public URL.

        Args:
            property_id: Owning property.
            file: The uploaded blob.
            key_prefix: Form key (``image-0``, ``video-1``...) used as filename prefix.

        Returns:
            URL of the form ``{url_prefix}/{property_id}/{file}?t={ms}``.

        Raises:
            InvalidInputError: If property_id is blank or not a safe directory name.
            StorageUnavailableError: If directories, the probe or the write fail.
        """
        pid = self._validated_id(property_id)
        return await asyncio.to_thread(self._write, pid, file, key_prefix)

    async def store_batch(
        self, property_id: str, files: Sequence[tuple[str, UploadedFile]]
    ) -> UploadBatchResult:
        """Store keyed files one after another.

        Keys ``image-N`` are images and ``video``/``video-N`` are videos; other
        keys and empty files are ignored. A failing file is logged and
        skipped so the rest of the batch still lands.

        Raises:
            InvalidInputError: If property_id is blank or unsafe.
            StorageUnavailableError: If the property directory cannot be created.
        """
        pid = self._validated_id(property_id)
        result = UploadBatchResult()

        accepted: list[tuple[str, UploadedFile, bool]] = []
        for key, file in files:
            is_image = bool(IMAGE_KEY_PATTERN.match(key))
            if not is_image and not VIDEO_KEY_PATTERN.match(key):
                logger.debug("upload_key_ignored", key=key)
                continue
            if file.size == 0:
                logger.warning("upload_empty_file_skipped", key=key, filename=file.filename)
                continue
            accepted.append((key, file, is_image))

        if not accepted:
            return result

        directory = await asyncio.to_thread(self.ensure_property_dir, pid)

        for key, file, is_image in accepted:
            result.attempted += 1
            try:
                url = await asyncio.to_thread(self._write, pid, file, key)
            except StorageUnavailableError as e:
                result.failed.append(key)
                logger.error(
                    "upload_failed",
                    property_id=pid,
                    key=key,
                    filename=file.filename,
                    size=file.size,
                    target_dir=str(directory),
                    error=str(e),
                )
                continue
            (result.images if is_image else result.videos).append(url)

        log = logger.warning if result.is_partial else logger.info
        log(
            "upload_batch_complete",
            property_id=pid,
            attempted=result.attempted,
            succeeded=result.succeeded,
            images=len(result.images),
            videos=len(result.videos),
        )
        return result

    async def remove_all(self, property_id: str) -> None:
        """Delete a property's media folder; a missing folder is not an error.

        Raises:
            InvalidInputError: If property_id is blank or unsafe.
            StorageUnavailableError: If the folder exists but cannot be removed.
        """
        pid = self._validated_id(property_id)
        target = self.property_dir(pid)
        if not target.exists():
            logger.debug("upload_dir_absent", property_id=pid)
            return
        try:
            await asyncio.to_thread(shutil.rmtree, target)
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageUnavailableError(f"Failed to remove media for {pid}: {e}") from e
        logger.info("upload_dir_removed", property_id=pid)

    async def remove_files(self, property_id: str, urls: Sequence[str]) -> None:
        """Delete individual stored files by the URLs ``store`` returned.

        URLs that do not point into this property's folder are ignored, as
        are files already gone.

        Raises:
            InvalidInputError: If property_id is blank or unsafe.
            StorageUnavailableError: If a file exists but cannot be removed.
        """
        pid = self._validated_id(property_id)
        folder_prefix = f"{self.url_prefix}/{pid}/"
        targets = []
        for url in urls:
            path = url.split("?", 1)[0]
            name = path.removeprefix(folder_prefix)
            if name == path or name in ("", ".", "..") or "/" in name:
                continue
            targets.append(self.property_dir(pid) / name)

        def _unlink_all() -> None:
            for target in targets:
                target.unlink(missing_ok=True)

        try:
            await asyncio.to_thread(_unlink_all)
        except OSError as e:
            raise StorageUnavailableError(f"Failed to remove media for {pid}: {e}") from e
        logger.info("upload_files_removed", property_id=pid, count=len(targets))

