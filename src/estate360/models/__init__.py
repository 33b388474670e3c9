"""Pydantic models for property records, search criteria and uploaded media."""

from estate360.models.core import (
    LAND_TYPE_PATTERN,
    SPEC_DEFAULTS,
    Category,
    PropertyRecord,
    PropertySpecs,
    SearchCriteria,
    as_text_list,
    is_land_type,
)
from estate360.models.media import MediaKind, UploadedFile

__all__ = [
    "LAND_TYPE_PATTERN",
    "SPEC_DEFAULTS",
    "Category",
    "MediaKind",
    "PropertyRecord",
    "PropertySpecs",
    "SearchCriteria",
    "UploadedFile",
    "as_text_list",
    "is_land_type",
]
