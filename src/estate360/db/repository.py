"""Property records as a collection: create, merge-update, cascade-delete.

Every mutation is a full read-modify-write of the store. Mutations in one
process are serialized by a lock; writers in separate processes still race
at collection granularity and the last save wins.
"""

import asyncio
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any, Final

from pydantic import ValidationError

from estate360.db.storage import PropertyStore
from estate360.exceptions import Estate360Error, InvalidInputError
from estate360.filters.criteria import filter_properties
from estate360.filters.location import regions_for
from estate360.filters.ordering import featured_only
from estate360.logging import get_logger
from estate360.models import (
    PropertyRecord,
    PropertySpecs,
    SearchCriteria,
    UploadedFile,
    as_text_list,
)
from estate360.uploads import UploadBatchResult, UploadManager

logger = get_logger(__name__)

REQUIRED_FIELDS: Final = (
    "title",
    "price",
    "location",
    "description",
    "category",
    "propertyType",
)

# Keys a caller can never overwrite through update()
PROTECTED_FIELDS: Final = frozenset({"id", "createdAt"})

DEFAULT_LOCATIONS: Final = ("Uttarakhand", "Dehradun", "Nainital", "Mussoorie")
DEFAULT_PROPERTY_TYPES: Final = ("House", "Apartment", "Plot", "Land")

_PLACEHOLDER_ID: Final = "pending"

FileParts = Sequence[tuple[str, UploadedFile]]


def utc_timestamp() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _alias_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    """Rename snake_case field names to their camelCase JSON keys."""
    fields = PropertyRecord.model_fields
    return {
        (fields[key].alias or key) if key in fields else key: value for key, value in data.items()
    }


def _is_blank(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, list):
        return not value
    return False


def _check_payload(data: object) -> dict[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"Property payload must be an object, got {type(data).__name__}")
    return _alias_keys(data)


def _validate(data: Mapping[str, Any]) -> PropertyRecord:
    try:
        return PropertyRecord.model_validate(data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid property payload: {e}") from e


def _specs_payload(raw: object) -> dict[str, Any]:
    if raw is not None and not isinstance(raw, Mapping | PropertySpecs):
        raise InvalidInputError("specs must be an object")
    try:
        specs = PropertySpecs.normalized(raw)  # type: ignore[arg-type]
    except ValidationError as e:
        raise InvalidInputError(f"Invalid specs: {e}") from e
    return specs.model_dump(by_alias=True)


def _media_list(value: object) -> list[Any]:
    coerced = as_text_list(value)
    return coerced if isinstance(coerced, list) else []


def _video_changes(changes: dict[str, Any]) -> dict[str, Any]:
    """Make videoUrls the only video key in a partial update."""
    legacy = changes.pop("videoUrl", None)
    if "videoUrls" not in changes and legacy is not None:
        changes["videoUrls"] = [legacy] if legacy else []
    return changes


class PropertyRepository:
    """Property records over a whole-collection store plus per-property media."""

    def __init__(
        self,
        store: PropertyStore,
        uploads: UploadManager,
        *,
        clock: Callable[[], str] = utc_timestamp,
    ) -> None:
        """Initialize the repository.

        Args:
            store: Record store holding the full collection.
            uploads: Media storage for uploaded files.
            clock: Source of ISO-8601 timestamps for createdAt/updatedAt.
        """
        self.store = store
        self.uploads = uploads
        self._clock = clock
        self._lock = asyncio.Lock()

    async def close(self) -> None:
        await self.store.close()

    # ------------------------------------------------------------------ reads

    async def get_all(self) -> list[PropertyRecord]:
        """Every record in stored order."""
        return await self.store.load_all()

    async def get_by_id(self, property_id: str) -> PropertyRecord | None:
        """Return the record with this id, or None."""
        for record in await self.store.load_all():
            if record.id == property_id:
                return record
        return None

    async def count(self) -> int:
        return len(await self.store.load_all())

    async def search(self, criteria: SearchCriteria) -> list[PropertyRecord]:
        """Records matching every present criterion, in stored order."""
        return filter_properties(await self.store.load_all(), criteria)

    async def get_featured(self) -> list[PropertyRecord]:
        """Featured records by ascending featuredOrder; unordered ones last."""
        return featured_only(await self.store.load_all())

    async def list_options(self) -> dict[str, list[str]]:
        """Distinct locations and property types for populating search forms.

        Locations are the first comma segment of each listing plus the name
        of every region a listing falls within. Property types are
        case-folded then capitalized. Empty sets fall back to defaults.
        """
        records = await self.store.load_all()

        locations: set[str] = set()
        for record in records:
            city = record.location.split(",")[0].strip()
            if city:
                locations.add(city)
            locations.update(region.title() for region in regions_for(record.location))

        types = sorted(
            {r.property_type.strip().lower() for r in records if r.property_type.strip()}
        )

        return {
            "locations": sorted(locations) or list(DEFAULT_LOCATIONS),
            "propertyTypes": [t[0].upper() + t[1:] for t in types] or list(DEFAULT_PROPERTY_TYPES),
        }

    # -------------------------------------------------------------- mutations

    async def _discard_uploads(
        self, property_id: str, media: UploadBatchResult, *, whole_folder: bool
    ) -> None:
        """Remove files written for a mutation that did not persist.

        A failed cleanup is logged; the caller re-raises the original error.
        """
        try:
            if whole_folder:
                await self.uploads.remove_all(property_id)
            else:
                await self.uploads.remove_files(property_id, media.urls)
        except Estate360Error as e:
            logger.error(
                "upload_rollback_failed",
                property_id=property_id,
                urls=media.urls,
                error=str(e),
            )
        else:
            logger.warning("upload_rolled_back", property_id=property_id, count=len(media.urls))

    async def create(self, data: Mapping[str, Any], files: FileParts = ()) -> str:
        """Create a listing and return its new id. See create_with_media."""
        property_id, _ = await self.create_with_media(data, files)
        return property_id

    async def create_with_media(
        self, data: Mapping[str, Any], files: FileParts = ()
    ) -> tuple[str, UploadBatchResult]:
        """Create a listing, storing any uploaded media under its new id.

        Args:
            data: Listing fields (camelCase or snake_case keys). title, price,
                location, description, category and propertyType are required.
            files: ``(key, file)`` pairs; keys ``image-N``, ``video`` or ``video-N``.

        Returns:
            The new id and the upload outcome. Files that failed to store
            are logged and missing from the record.

        Raises:
            InvalidInputError: If the payload is malformed. Nothing is written.
            StorageUnavailableError: If the store or uploads root is unusable.
        """
        payload = _check_payload(data)
        missing = [name for name in REQUIRED_FIELDS if _is_blank(payload.get(name))]
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

        payload["specs"] = _specs_payload(payload.get("specs"))
        payload.pop("id", None)
        _validate({**payload, "id": _PLACEHOLDER_ID})

        property_id = str(uuid.uuid4())
        now = self._clock()

        async with self._lock:
            media = await self.uploads.store_batch(property_id, files)

            videos = payload.get("videoUrls")
            if videos is None:
                legacy = payload.get("videoUrl")
                videos = [legacy] if legacy else []
            payload.pop("videoUrl", None)

            try:
                record = _validate(
                    {
                        **payload,
                        "id": property_id,
                        "images": [*_media_list(payload.get("images")), *media.images],
                        "videoUrls": [*_media_list(videos), *media.videos],
                        "createdAt": now,
                        "updatedAt": now,
                    }
                )

                records = await self.store.load_all()
                records.append(record)
                await self.store.save_all(records)
            except Estate360Error:
                if media.attempted:
                    await self._discard_uploads(property_id, media, whole_folder=True)
                raise

        logger.info(
            "property_created",
            property_id=property_id,
            title=record.title,
            images=len(record.images),
            videos=len(record.video_urls),
            uploads_attempted=media.attempted,
            uploads_succeeded=media.succeeded,
        )
        return property_id, media

    async def update(
        self, property_id: str, partial: Mapping[str, Any], files: FileParts = ()
    ) -> bool:
        """Merge changes into a listing; False if it does not exist."""
        return await self.update_with_media(property_id, partial, files) is not None

    async def update_with_media(
        self, property_id: str, partial: Mapping[str, Any], files: FileParts = ()
    ) -> UploadBatchResult | None:
        """Shallow-merge ``partial`` into an existing listing.

        ``id`` and ``createdAt`` are never overwritten. Newly uploaded images
        are appended after the record's images (or after the caller's
        replacement list), new videos after ``videoUrls``. A partial with
        only the legacy ``videoUrl`` key replaces the video list with it.

        Returns:
            The upload outcome, or None if no listing has this id. In that
            case no file is written.

        Raises:
            InvalidInputError: If the partial is malformed. Nothing is written.
            StorageUnavailableError: If the store or uploads root is unusable.
        """
        if not property_id or not property_id.strip():
            raise InvalidInputError("A property id is required")

        changes = _video_changes(
            {k: v for k, v in _check_payload(partial).items() if k not in PROTECTED_FIELDS}
        )
        blank = [name for name in REQUIRED_FIELDS if name in changes and _is_blank(changes[name])]
        if blank:
            raise InvalidInputError(f"Required fields cannot be blank: {', '.join(blank)}")
        if "specs" in changes and not isinstance(changes["specs"], Mapping | PropertySpecs):
            raise InvalidInputError("specs must be an object")
        _validate({**changes, "id": _PLACEHOLDER_ID})

        async with self._lock:
            records = await self.store.load_all()
            index = next((i for i, r in enumerate(records) if r.id == property_id), None)
            if index is None:
                logger.info("property_not_found", property_id=property_id, action="update")
                return None

            media = await self.uploads.store_batch(property_id, files)

            merged = {**records[index].to_json_dict(), **changes}
            merged.pop("videoUrl", None)
            if media.images:
                merged["images"] = [*_media_list(merged.get("images")), *media.images]
            if media.videos or "videoUrls" in merged:
                merged["videoUrls"] = [*_media_list(merged.get("videoUrls")), *media.videos]
            merged["updatedAt"] = self._clock()

            try:
                records[index] = _validate(merged)
                await self.store.save_all(records)
            except Estate360Error:
                if media.urls:
                    await self._discard_uploads(property_id, media, whole_folder=False)
                raise

        logger.info(
            "property_updated",
            property_id=property_id,
            fields=sorted(changes),
            uploads_attempted=media.attempted,
            uploads_succeeded=media.succeeded,
        )
        return media

    async def delete(self, property_id: str) -> bool:
        """Remove a listing and its media folder; False if it does not exist.

        The media folder goes first, so a failed purge leaves the record in
        place and the delete can be retried.
        """
        async with self._lock:
            records = await self.store.load_all()
            remaining = [r for r in records if r.id != property_id]
            if len(remaining) == len(records):
                logger.info("property_not_found", property_id=property_id, action="delete")
                return False

            await self.uploads.remove_all(property_id)
            await self.store.save_all(remaining)

        logger.info("property_deleted", property_id=property_id)
        return True

    async def set_featured_order(
        self, updates: Mapping[str, int] | Iterable[tuple[str, int]]
    ) -> dict[str, bool]:
        """Assign homepage positions in one load/save cycle.

        Each listed record gets its featuredOrder and is marked featured.

        Returns:
            Per-id success; False for ids that do not exist.
        """
        items = list(updates.items() if isinstance(updates, Mapping) else updates)
        results: dict[str, bool] = {}

        async with self._lock:
            records = await self.store.load_all()
            positions = {r.id: i for i, r in enumerate(records)}
            now = self._clock()
            for property_id, order in items:
                index = positions.get(property_id)
                if index is None:
                    results[property_id] = False
                    continue
                records[index] = records[index].model_copy(
                    update={"featured": True, "featured_order": order, "updated_at": now}
                )
                results[property_id] = True

            if any(results.values()):
                await self.store.save_all(records)

        logger.info(
            "featured_order_updated",
            requested=len(items),
            updated=sum(results.values()),
        )
        return results
