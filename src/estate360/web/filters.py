"""FastAPI dependencies that parse listing query parameters."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query

from estate360.filters.ordering import VALID_SORT_OPTIONS
from estate360.models import SearchCriteria


def parse_filters(
    category: str | None = None,
    location: str | None = None,
    property_type: Annotated[str | None, Query(alias="propertyType")] = None,
    bhk_option: Annotated[str | None, Query(alias="bhkOption")] = None,
    price_min: Annotated[str | None, Query(alias="priceMin")] = None,
    price_max: Annotated[str | None, Query(alias="priceMax")] = None,
) -> SearchCriteria:
    """FastAPI dependency that parses query params into SearchCriteria.

    Blank values impose no constraint; non-numeric price bounds are dropped.
    """
    return SearchCriteria.model_validate(
        {
            "category": category,
            "location": location,
            "property_type": property_type,
            "bhk_option": bhk_option,
            "price_min": price_min,
            "price_max": price_max,
        }
    )


def parse_sort(sort: str | None = None) -> str | None:
    """Keep a recognised sort option; anything else leaves stored order."""
    if sort is None:
        return None
    cleaned = sort.strip().lower()
    return cleaned if cleaned in VALID_SORT_OPTIONS else None


CriteriaDep = Annotated[SearchCriteria, Depends(parse_filters)]
SortDep = Annotated[str | None, Depends(parse_sort)]
