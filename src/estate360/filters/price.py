"""Normalization of free-form Indian listing prices."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Final

CRORE: Final = Decimal(10_000_000)
LAKH: Final = Decimal(100_000)

UNIT_MULTIPLIERS: Final[dict[str, Decimal]] = {
    "cr": CRORE,
    "crs": CRORE,
    "crore": CRORE,
    "crores": CRORE,
    "l": LAKH,
    "lac": LAKH,
    "lacs": LAKH,
    "lakh": LAKH,
    "lakhs": LAKH,
}

# Currency markers that may precede or follow the amount. A trailing marker
# needs a space or a digit before it so the "rs" in "Crs" stays a unit.
_CURRENCY_PREFIX: Final = re.compile(r"^(?:₹|rs\.?|inr)\s*", re.IGNORECASE)
_CURRENCY_SUFFIX: Final = re.compile(r"(?:(?<=\d)|\s+)(?:₹|rs\.?|inr)$", re.IGNORECASE)
_SEPARATORS: Final = re.compile(r"[\s,]")
_AMOUNT: Final = re.compile(r"^(?P<number>\d+(?:\.\d+)?)\s*(?P<unit>[a-z]+)?\.?$", re.IGNORECASE)


def parse_price(text: str | int | float | None) -> int | None:
    """Convert a listing price to an absolute rupee amount.

    Handles the formats seen in listings: "₹ 1,25,00,000", "95,00,000/-",
    "1.2 Cr", "45 L", "Rs. 85 Lakh", "95,00,000 INR". Currency markers may
    lead or trail. A trailing unit multiplies the leading number
    (Cr = 1,00,00,000; L/Lakh = 1,00,000); without one the digits are the
    amount itself.

    Args:
        text: Price as stored on the record.

    Returns:
        Price in rupees (fractional rupees truncated), or None if the text
        is empty or not a recognisable price.
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int | float):
        return int(text) if math.isfinite(text) and text >= 0 else None

    cleaned = text.strip()
    cleaned = _CURRENCY_PREFIX.sub("", cleaned)
    cleaned = _CURRENCY_SUFFIX.sub("", cleaned).rstrip()
    cleaned = _SEPARATORS.sub("", cleaned)
    if cleaned.endswith("/-"):
        cleaned = cleaned[:-2]

    match = _AMOUNT.match(cleaned)
    if not match:
        return None

    try:
        number = Decimal(match.group("number"))
    except InvalidOperation:
        return None

    unit = (match.group("unit") or "").lower()
    if unit:
        multiplier = UNIT_MULTIPLIERS.get(unit)
        if multiplier is None:
            return None
        number *= multiplier

    return int(number)
