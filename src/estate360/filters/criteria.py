"""Multi-criteria filtering of property records."""

from collections.abc import Iterable

from estate360.filters.location import matches_location
from estate360.filters.price import parse_price
from estate360.logging import get_logger
from estate360.models import PropertyRecord, SearchCriteria

logger = get_logger(__name__)


class CriteriaFilter:
    """Filter property records by search criteria.

    Every criterion is optional; present criteria are ANDed together. A
    record whose price cannot be parsed never satisfies a price bound.
    """

    def __init__(self, criteria: SearchCriteria) -> None:
        """Initialize the criteria filter.

        Args:
            criteria: Search criteria to filter by.
        """
        self.criteria = criteria

    def matches(self, record: PropertyRecord) -> bool:
        """Check a single record against every present criterion."""
        c = self.criteria

        if c.category is not None and record.category.value != c.category:
            return False

        if c.location is not None and not matches_location(record.location, c.location):
            return False

        if c.property_type is not None and (
            record.property_type.strip().lower() != c.property_type.lower()
        ):
            return False

        if c.bhk_option is not None and record.bedroom_count != c.bhk_option:
            return False

        if c.price_min is not None or c.price_max is not None:
            price = parse_price(record.price)
            if price is None:
                logger.debug("unparsable_price_excluded", property_id=record.id, price=record.price)
                return False
            if c.price_min is not None and price < c.price_min:
                return False
            if c.price_max is not None and price > c.price_max:
                return False

        return True

    def filter_properties(self, records: Iterable[PropertyRecord]) -> list[PropertyRecord]:
        """Filter records by criteria, keeping their original order.

        Args:
            records: Records to filter.

        Returns:
            Records matching the criteria.
        """
        records = list(records)
        if self.criteria.is_empty:
            return records

        matching = [r for r in records if self.matches(r)]

        logger.info(
            "criteria_filter_complete",
            total_properties=len(records),
            matching=len(matching),
            **self.criteria.active(),
        )

        return matching


def filter_properties(
    records: Iterable[PropertyRecord], criteria: SearchCriteria
) -> list[PropertyRecord]:
    """Return the records matching ``criteria`` in their original order."""
    return CriteriaFilter(criteria).filter_properties(records)
