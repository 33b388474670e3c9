"""Tests for location matching."""

import pytest

from estate360.filters.location import (
    REGION_ALIASES,
    REGION_SUBREGIONS,
    location_segments,
    matches_location,
    normalize_location,
    regions_for,
)


class TestRegionData:
    def test_uttarakhand_loaded(self) -> None:
        subregions = REGION_SUBREGIONS["uttarakhand"]
        assert "nainital" in subregions
        assert "bhimtal" in subregions
        assert "uttarakhand" in subregions

    def test_aliases_point_to_known_regions(self) -> None:
        assert set(REGION_ALIASES.values()) <= set(REGION_SUBREGIONS)

    def test_subregions_are_lowercase(self) -> None:
        for names in REGION_SUBREGIONS.values():
            assert all(name == name.lower() for name in names)


class TestNormalizeLocation:
    @pytest.mark.parametrize(
        ("term", "expected"),
        [
            ("Uttrakhand", "uttarakhand"),
            (" UTTARANCHAL ", "uttarakhand"),
            ("Nainital", "nainital"),
        ],
    )
    def test_normalize(self, term: str, expected: str) -> None:
        assert normalize_location(term) == expected


class TestSegments:
    def test_splits_and_trims(self) -> None:
        assert location_segments("Bhimtal , Nainital,Uttarakhand,") == [
            "bhimtal",
            "nainital",
            "uttarakhand",
        ]

    def test_regions_for(self) -> None:
        assert regions_for("Ranikhet, Almora") == ["uttarakhand"]
        assert regions_for("Panaji, Goa") == []


class TestMatchesLocation:
    @pytest.mark.parametrize("term", [None, "", "   "])
    def test_blank_term_matches_everything(self, term: str | None) -> None:
        assert matches_location("Anywhere", term)
        assert matches_location("", term)

    def test_empty_location_never_matches_a_term(self) -> None:
        assert not matches_location("", "Nainital")
        assert not matches_location(None, "Nainital")

    def test_segment_match_is_case_insensitive(self) -> None:
        assert matches_location("Bhimtal, Nainital, Uttarakhand", "nainital")
        assert matches_location("Bhimtal, Nainital, Uttarakhand", " BHIMTAL ")

    def test_whole_location_match(self) -> None:
        assert matches_location("Civil Lines, Delhi", "civil lines, delhi")

    def test_partial_segment_does_not_match(self) -> None:
        assert not matches_location("Bhimtal, Nainital", "Nain")
        assert not matches_location("Dehradun Cantt, Dehradun", "Cantt")

    def test_region_matches_any_subregion(self) -> None:
        assert matches_location("Mall Road, Mussoorie", "Uttarakhand")
        assert matches_location("Bhimtal", "uttarakhand")

    def test_region_alias(self) -> None:
        assert matches_location("Bhimtal, Uttarakhand", "Uttrakhand")
        assert matches_location("Ranikhet", "Uttaranchal")

    def test_region_excludes_elsewhere(self) -> None:
        assert not matches_location("Panaji, Goa", "Uttarakhand")

    def test_region_substring_match(self) -> None:
        # Sub-region names are matched anywhere in the location text
        assert matches_location("Near Nainital lake road", "Uttarakhand")
