"""Tests for query-parameter parsing dependencies."""

import pytest

from estate360.models import SearchCriteria
from estate360.web.filters import parse_filters, parse_sort


class TestParseFilters:
    def test_no_params_is_empty(self) -> None:
        assert parse_filters().is_empty

    def test_values_are_trimmed(self) -> None:
        criteria = parse_filters(category=" buy ", location="  Nainital", property_type="Plot ")

        assert criteria == SearchCriteria(category="buy", location="Nainital", property_type="Plot")

    def test_blank_values_are_ignored(self) -> None:
        criteria = parse_filters(category="", location="   ", bhk_option="")
        assert criteria.is_empty

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("5000000", 5_000_000), (" 250000 ", 250_000), ("abc", None), ("", None)],
    )
    def test_price_bounds(self, raw: str, expected: int | None) -> None:
        criteria = parse_filters(price_min=raw, price_max=raw)

        assert criteria.price_min == expected
        assert criteria.price_max == expected

    def test_active_uses_query_names(self) -> None:
        criteria = parse_filters(property_type="House", bhk_option="3", price_max="9000000")

        assert criteria.active() == {
            "propertyType": "House",
            "bhkOption": "3",
            "priceMax": 9_000_000,
        }


class TestParseSort:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("featured", "featured"),
            (" Newest ", "newest"),
            ("price", None),
            ("", None),
            (None, None),
        ],
    )
    def test_parse_sort(self, raw: str | None, expected: str | None) -> None:
        assert parse_sort(raw) == expected
