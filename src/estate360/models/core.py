"""Core property record and search criteria models."""

import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any, Final, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


class Category(StrEnum):
    """Listing category."""

    BUY = "buy"
    LEASE = "lease"


# Property types naming one of these words have no bedrooms/bathrooms
LAND_TYPE_PATTERN: Final = re.compile(r"\b(?:plots?|(?:farm)?lands?)\b", re.IGNORECASE)

# Filled into specs at creation so display code always sees the same shape
SPEC_DEFAULTS: Final[dict[str, str]] = {
    "bedrooms": "0",
    "bathrooms": "0",
    "area": "0 sq ft",
    "landSize": "0 Nali",
    "naliSize": "",
    "plotSize": "",
    "plotDimensions": "",
    "plotType": "",
}

_LEADING_INT = re.compile(r"^\s*(\d+)")


def _stringify(value: object) -> object:
    """Coerce loosely-typed JSON scalars to the string form listings use."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else str(value)
    return value


def as_text_list(value: object) -> object:
    """Accept the loose list shapes found in older records.

    None becomes [], a bare string becomes a one-item list (or [] when blank)
    None items are dropped and numeric ones stringified.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list | tuple):
        return [_stringify(item) for item in value if item is not None]
    return value


def _first_present(data: Mapping[str, Any], *keys: str) -> str | None:
    for key in keys:
        if key in data:
            return key
    return None


def is_land_type(property_type: str | None) -> bool:
    """Whether a property type describes bare land (plot, land, farmland...)."""
    return bool(LAND_TYPE_PATTERN.search(property_type or ""))


class PropertySpecs(BaseModel):
    """Loosely-structured property specifications.

    Every field is an optional free-form string ("3", "2400 sq ft", "12 Nali").
    Unanticipated attributes are kept as extras rather than dropped.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    bedrooms: str = ""
    bathrooms: str = ""
    area: str = ""
    land_size: str = ""
    nali_size: str = ""
    plot_size: str = ""
    plot_dimensions: str = ""
    plot_type: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, v: object) -> object:
        return _stringify(v)

    @classmethod
    def normalized(cls, raw: "Mapping[str, Any] | PropertySpecs | None") -> Self:
        """Build specs with every known field populated.

        Missing or empty fields get the zero/empty default from SPEC_DEFAULTS.
        """
        if isinstance(raw, PropertySpecs):
            data: dict[str, Any] = raw.model_dump(by_alias=True)
        else:
            data = dict(raw or {})
        for name, field in cls.model_fields.items():
            alias = field.alias or name
            key = _first_present(data, alias, name) or alias
            value = _stringify(data.pop(key, None))
            data[alias] = value if value != "" else SPEC_DEFAULTS[alias]
        return cls.model_validate(data)


class PropertyRecord(BaseModel):
    """A property listing as stored in the record collection.

    JSON keys are camelCase (``propertyType``, ``videoUrls``...). ``video_urls``
    is the source of truth for videos; ``video_url`` always mirrors its first
    entry. Attributes not modelled here survive a load/save cycle as extras.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    id: str = Field(min_length=1)
    title: str = ""
    price: str = Field(default="", description="Free-form price, e.g. '₹ 95,00,000' or '1.2 Cr'")
    location: str = Field(default="", description="Comma-separated region hierarchy")
    description: str = ""
    category: Category = Category.BUY
    property_type: str = ""
    specs: PropertySpecs = Field(default_factory=PropertySpecs)
    features: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    images: list[str] = Field(default_factory=list)
    video_url: str = ""
    video_urls: list[str] = Field(default_factory=list)
    featured: bool = False
    featured_order: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @model_validator(mode="before")
    @classmethod
    def mirror_video_url(cls, data: Any) -> Any:
        """Derive videoUrl from videoUrls[0]; lift a legacy lone videoUrl into the list."""
        if not isinstance(data, Mapping):
            return data
        data = dict(data)
        urls_key = _first_present(data, "videoUrls", "video_urls")
        url_key = _first_present(data, "videoUrl", "video_url") or "videoUrl"

        if urls_key is None:
            legacy = data.get(url_key)
            if not legacy:
                return data
            urls_key = "videoUrls"
            data[urls_key] = [legacy]

        urls = data[urls_key] = as_text_list(data[urls_key])
        data[url_key] = urls[0] if isinstance(urls, list) and urls else ""
        return data

    @field_validator("title", "price", "location", "property_type", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> object:
        return _stringify(v)

    @field_validator("description", mode="before")
    @classmethod
    def join_description(cls, v: object) -> object:
        """Older listings stored the description as a list of paragraphs."""
        if isinstance(v, list):
            return "\n\n".join(str(p) for p in v)
        return _stringify(v)

    @field_validator("features", "amenities", "images", mode="before")
    @classmethod
    def coerce_list(cls, v: object) -> object:
        return as_text_list(v)

    @property
    def is_land(self) -> bool:
        """Plots and land have no meaningful bedroom/bathroom counts."""
        return is_land_type(self.property_type)

    @property
    def bedroom_count(self) -> str | None:
        """Bedroom count as listed, or None when absent or meaningless."""
        if self.is_land:
            return None
        value = self.specs.bedrooms or _stringify((self.model_extra or {}).get("bedrooms"))
        if not isinstance(value, str):
            return None
        value = value.strip()
        return value or None

    def to_json_dict(self) -> dict[str, Any]:
        """Serialize with camelCase keys, keeping only fields that were provided."""
        data = self.model_dump(mode="json", by_alias=True, exclude_unset=True)
        for key, value in (self.model_extra or {}).items():
            data.setdefault(key, value)
        return data


class SearchCriteria(BaseModel):
    """Sparse search criteria; every unset field imposes no constraint."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    category: str | None = None
    location: str | None = None
    property_type: str | None = None
    bhk_option: str | None = None
    price_min: int | None = Field(default=None, ge=0)
    price_max: int | None = Field(default=None, ge=0)

    @field_validator("category", "location", "property_type", "bhk_option", mode="before")
    @classmethod
    def blank_to_none(cls, v: object) -> object:
        if v is None:
            return None
        cleaned = str(v).strip()
        return cleaned or None

    @field_validator("price_min", "price_max", mode="before")
    @classmethod
    def parse_bound(cls, v: object) -> int | None:
        """Accept ints or numeric strings; anything else means no bound."""
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, int):
            return v
        if isinstance(v, float):
            return int(v)
        match = _LEADING_INT.match(str(v))
        return int(match.group(1)) if match else None

    @property
    def is_empty(self) -> bool:
        """True when no criterion is set."""
        return not self.model_dump(exclude_none=True)

    def active(self) -> dict[str, Any]:
        """The criteria that are set, keyed by their query-string names."""
        return self.model_dump(by_alias=True, exclude_none=True)
