"""Location matching for listing searches.

Listing locations are free text, usually a comma-separated hierarchy such
as "Bhimtal, Nainital, Uttarakhand". A search term matches when it equals
one of those segments. Searching by a region name (a state) instead matches
every listing that mentions one of the region's known towns or districts.
"""

import json
from pathlib import Path
from typing import Final

# Load region -> sub-region table from JSON data file
_DATA_PATH = Path(__file__).resolve().parent.parent / "data" / "regions.json"
try:
    _DATA = json.loads(_DATA_PATH.read_text(encoding="utf-8"))
except (FileNotFoundError, json.JSONDecodeError) as e:
    raise RuntimeError(f"Failed to load {_DATA_PATH}: {e}") from e

REGION_SUBREGIONS: Final[dict[str, tuple[str, ...]]] = {
    region: tuple(name.lower() for name in names)
    for region, names in _DATA["region_subregions"].items()
}

REGION_ALIASES: Final[dict[str, str]] = _DATA["region_aliases"]


def normalize_location(term: str) -> str:
    """Lowercase, trim and resolve spelling aliases of a location term."""
    normalized = term.lower().strip()
    return REGION_ALIASES.get(normalized, normalized)


def location_segments(location: str) -> list[str]:
    """Split a listing location into trimmed, lowercased comma segments."""
    return [part.strip().lower() for part in location.split(",") if part.strip()]


def regions_for(location: str) -> list[str]:
    """Names of the configured regions a listing location falls within."""
    lowered = location.lower()
    return [
        region
        for region, subregions in REGION_SUBREGIONS.items()
        if any(name in lowered for name in subregions)
    ]


def matches_location(location: str | None, term: str | None) -> bool:
    """Check whether a listing location satisfies a location search term.

    Args:
        location: The listing's free-form location.
        term: The search term. Blank means no constraint.

    Returns:
        True if the listing matches.
    """
    if term is None or not term.strip():
        return True
    if not location:
        return False

    wanted = normalize_location(term)
    subregions = REGION_SUBREGIONS.get(wanted)
    if subregions is not None:
        lowered = location.lower()
        return any(name in lowered for name in subregions)

    lowered_term = term.lower().strip()
    if location.lower().strip() == lowered_term:
        return True
    return lowered_term in location_segments(location)
