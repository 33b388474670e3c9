"""Caller-side orderings applied after filtering."""

import sys
from collections.abc import Iterable
from typing import Final, Literal

from estate360.models import PropertyRecord

SortOption = Literal["featured", "newest"]
VALID_SORT_OPTIONS: Final = ("featured", "newest")


def sort_by_featured_order(records: Iterable[PropertyRecord]) -> list[PropertyRecord]:
    """Ascending featuredOrder; records without an order go last.

    The sort is stable, so equal orders keep insertion order.
    """
    return sorted(
        records,
        key=lambda r: r.featured_order if r.featured_order is not None else sys.maxsize,
    )


def sort_by_newest(records: Iterable[PropertyRecord]) -> list[PropertyRecord]:
    """Most recently created first (ISO-8601 timestamps sort lexically)."""
    return sorted(records, key=lambda r: r.created_at, reverse=True)


def featured_only(records: Iterable[PropertyRecord]) -> list[PropertyRecord]:
    """Featured records in homepage display order."""
    return sort_by_featured_order(r for r in records if r.featured)


def apply_sort(records: list[PropertyRecord], sort: str | None) -> list[PropertyRecord]:
    """Apply a named ordering; unknown or missing names keep the given order."""
    if sort == "featured":
        return sort_by_featured_order(records)
    if sort == "newest":
        return sort_by_newest(records)
    return records
