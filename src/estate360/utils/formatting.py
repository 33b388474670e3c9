"""Display formatting for Indian prices and land areas."""

import re
from typing import Final

from estate360.models import PropertySpecs, is_land_type

CRORE: Final = 10_000_000
LAKH: Final = 100_000

# 1 Nali is roughly 2160 sq ft (varies slightly by district)
NALI_TO_SQFT: Final = 2160

_NUMBER = re.compile(r"\d+(?:\.\d+)?")


def _trim_decimals(value: float) -> str:
    text = f"{value:.2f}"
    return text[:-3] if text.endswith(".00") else text


def _group_indian(value: int) -> str:
    """Group digits the Indian way: 12,34,567."""
    digits = str(value)
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join([*groups, tail])


def format_indian_price(amount: int | float | None) -> str:
    """Format a rupee amount for display.

    E.g. 58500000 -> "₹ 5.85 Crore", 4500000 -> "₹ 45 Lakh", 75000 -> "₹ 75,000"
    """
    if not amount:
        return "₹ 0"
    if amount >= CRORE:
        return f"₹ {_trim_decimals(amount / CRORE)} Crore"
    if amount >= LAKH:
        return f"₹ {_trim_decimals(amount / LAKH)} Lakh"
    if amount >= 1000:
        return f"₹ {_group_indian(int(amount))}"
    return f"₹ {_trim_decimals(float(amount))}"


def sqft_to_nali(sqft: float) -> float:
    return sqft / NALI_TO_SQFT


def nali_to_sqft(nali: float) -> float:
    return nali * NALI_TO_SQFT


def _leading_number(text: str) -> float | None:
    match = _NUMBER.search(text.replace(",", ""))
    return float(match.group()) if match else None


def format_area(specs: PropertySpecs, property_type: str | None) -> str:
    """Pick the most meaningful area figure for a listing.

    Land and plots are shown in Nali (converting from square feet when the
    stored value is in sq ft); buildings are shown in square feet.
    """
    if specs.nali_size:
        return specs.nali_size if "nali" in specs.nali_size.lower() else f"{specs.nali_size} Nali"

    if is_land_type(property_type) and specs.land_size:
        land = specs.land_size
        if "nali" in land.lower():
            return land
        number = _leading_number(land)
        if number is None:
            return land
        if "sq" in land.lower():
            return f"{sqft_to_nali(number):.0f} Nali"
        return f"{_trim_decimals(number)} Nali"

    number = _leading_number(specs.area) if specs.area else None
    if not number:
        return "-"
    if is_land_type(property_type):
        return f"{sqft_to_nali(number):.0f} Nali"
    return f"{_group_indian(int(number))} sq ft"
