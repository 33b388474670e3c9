"""JSON API routes for property listings."""

import json
from typing import Any, Final

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from starlette.datastructures import UploadFile

from estate360.db import PropertyRepository
from estate360.exceptions import InvalidInputError
from estate360.filters.ordering import apply_sort
from estate360.logging import get_logger
from estate360.models import PropertyRecord, UploadedFile
from estate360.uploads import IMAGE_KEY_PATTERN, VIDEO_KEY_PATTERN, UploadBatchResult
from estate360.web.filters import CriteriaDep, SortDep

logger = get_logger(__name__)

router = APIRouter()

# Multipart fields that carry JSON-encoded values
JSON_FORM_FIELDS: Final = frozenset({"specs", "features", "amenities", "images", "videoUrls"})
PROPERTY_DATA_FIELD: Final = "propertyData"

FileParts = list[tuple[str, UploadedFile]]


def _get_repository(request: Request) -> PropertyRepository:
    return request.app.state.repository  # type: ignore[no-any-return]


def _records_json(records: list[PropertyRecord]) -> list[dict[str, Any]]:
    return [r.to_json_dict() for r in records]


def _uploads_json(media: UploadBatchResult) -> dict[str, int]:
    return media.summary()


async def _read_payload(request: Request) -> tuple[dict[str, Any], FileParts]:
    """Extract listing fields and uploaded files from a JSON or multipart body.

    Multipart bodies carry either a ``propertyData`` JSON field or one form
    field per listing attribute. File parts keyed ``image-N``, ``video`` or
    ``video-N`` become uploads; other file parts are ignored.
    """
    content_type = request.headers.get("content-type", "")

    if "multipart/form-data" not in content_type:
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidInputError(f"Request body is not valid JSON: {e}") from e
        if not isinstance(body, dict):
            raise InvalidInputError("Request body must be a JSON object")
        return body, []

    form = await request.form()
    fields: dict[str, Any] = {}
    files: FileParts = []
    property_data: str | None = None

    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if IMAGE_KEY_PATTERN.match(key) or VIDEO_KEY_PATTERN.match(key):
                files.append(
                    (
                        key,
                        UploadedFile(
                            filename=value.filename or key,
                            data=await value.read(),
                            content_type=value.content_type or "",
                        ),
                    )
                )
            continue
        if key == PROPERTY_DATA_FIELD:
            property_data = value
        elif key in JSON_FORM_FIELDS:
            try:
                fields[key] = json.loads(value)
            except json.JSONDecodeError:
                logger.warning("form_field_not_json", field=key)
                fields[key] = value
        else:
            fields[key] = value

    if property_data is not None:
        try:
            decoded = json.loads(property_data)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Invalid propertyData JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise InvalidInputError("propertyData must be a JSON object")
        fields = decoded

    return fields, files


@router.get("/health")
async def health_check() -> JSONResponse:
    """Liveness probe."""
    return JSONResponse({"status": "ok"})


@router.get("/properties")
async def list_properties(request: Request, criteria: CriteriaDep, sort: SortDep) -> JSONResponse:
    """Listings matching the query filters, optionally sorted."""
    repository = _get_repository(request)
    records = await repository.search(criteria)
    return JSONResponse(_records_json(apply_sort(records, sort)))


@router.get("/properties/options")
async def property_options(request: Request) -> JSONResponse:
    """Locations and property types for search dropdowns."""
    repository = _get_repository(request)
    return JSONResponse(await repository.list_options())


@router.get("/properties/featured")
async def featured_properties(request: Request) -> JSONResponse:
    """Featured listings in homepage order."""
    repository = _get_repository(request)
    return JSONResponse(_records_json(await repository.get_featured()))


@router.post("/properties/featured-order")
async def update_featured_order(request: Request) -> JSONResponse:
    """Set homepage positions from ``{"updates": [{"id", "featuredOrder"}]}``."""
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return JSONResponse({"error": "Request body is not valid JSON"}, status_code=400)

    updates = body.get("updates") if isinstance(body, dict) else None
    if not isinstance(updates, list) or not updates:
        return JSONResponse(
            {"error": "Invalid request: updates array is required"}, status_code=400
        )

    results: list[dict[str, Any]] = []
    valid: list[tuple[str, int]] = []
    for update in updates:
        property_id = update.get("id") if isinstance(update, dict) else None
        order = update.get("featuredOrder") if isinstance(update, dict) else None
        if not property_id or not isinstance(order, int) or isinstance(order, bool):
            error = "id and integer featuredOrder required"
            results.append({"id": property_id, "success": False, "error": error})
            continue
        valid.append((str(property_id), order))

    if valid:
        outcome = await _get_repository(request).set_featured_order(valid)
        for property_id, _ in valid:
            if outcome.get(property_id):
                results.append({"id": property_id, "success": True})
            else:
                results.append({"id": property_id, "success": False, "error": "Property not found"})

    all_ok = all(r["success"] for r in results)
    return JSONResponse({"success": all_ok, "results": results}, status_code=200 if all_ok else 207)


@router.get("/properties/{property_id}")
async def get_property(request: Request, property_id: str) -> JSONResponse:
    """A single listing."""
    record = await _get_repository(request).get_by_id(property_id)
    if record is None:
        return JSONResponse({"error": "Property not found"}, status_code=404)
    return JSONResponse(record.to_json_dict())


@router.post("/properties")
async def create_property(request: Request) -> JSONResponse:
    """Create a listing from a JSON or multipart body."""
    fields, files = await _read_payload(request)
    property_id, media = await _get_repository(request).create_with_media(fields, files)
    return JSONResponse(
        {"id": property_id, "uploads": _uploads_json(media)},
        status_code=201,
    )


@router.put("/properties/{property_id}")
async def update_property(request: Request, property_id: str) -> JSONResponse:
    """Merge changes into a listing."""
    fields, files = await _read_payload(request)
    media = await _get_repository(request).update_with_media(property_id, fields, files)
    if media is None:
        return JSONResponse({"error": "Property not found"}, status_code=404)
    return JSONResponse({"success": True, "uploads": _uploads_json(media)})


@router.delete("/properties/{property_id}")
async def delete_property(request: Request, property_id: str) -> JSONResponse:
    """Delete a listing and its media."""
    if not await _get_repository(request).delete(property_id):
        return JSONResponse({"error": "Property not found"}, status_code=404)
    return JSONResponse({"success": True})
