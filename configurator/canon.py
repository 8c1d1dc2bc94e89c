"""Text canonicalization and cell coercion helpers.

Sheet cells arrive as whatever the data source produced: strings with
stray non-breaking spaces, booleans, numbers, or nothing at all. These
helpers turn them into stable comparison keys and typed values.
"""

import math
import re
import unicodedata
from typing import Any, Optional

from configurator.errors import MalformedCell
from configurator.models import PriceType, normalize_header

__all__ = [
    "clean_str",
    "canon",
    "normalize_header",
    "is_blank",
    "parse_flexible_boolean",
    "parse_number",
    "parse_price_type",
]

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")
_NUMBER_NOISE = re.compile(r"[$,\s]")

_PRICE_TYPE_ALIASES = {
    "add": PriceType.ADD,
    "flat": PriceType.ADD,
    "pct": PriceType.PCT,
    "percent": PriceType.PCT,
    "%": PriceType.PCT,
    "abs": PriceType.ABS,
}


def clean_str(value: Any) -> str:
    """Stringify a cell, mapping None to "" and NBSP to a plain space."""
    if value is None:
        return ""
    return str(value).replace("\u00a0", " ").strip()


def canon(text: Any) -> str:
    """Map a display string to a stable comparison key.

    Tolerant of case, whitespace and punctuation: "Head  Stock",
    "head-stock" and "HEADSTOCK" all map to "headstock". Never raises.

    Args:
        text: Any cell value (None is treated as an empty string).

    Returns:
        Lower-case ASCII alphanumeric key, possibly empty.
    """
    normalized = unicodedata.normalize("NFKC", clean_str(text))
    words = _NON_ALNUM.sub(" ", normalized).strip().lower()
    return words.replace(" ", "")


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after cleaning."""
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and clean_str(value) == ""


def parse_flexible_boolean(value: Any, default_when_absent: bool = False) -> bool:
    """Coerce a boolean-ish cell.

    True for boolean True, the text "true" in any case, and the number 1
    (CSV exports deliver it as the text "1"). Blank cells return
    ``default_when_absent``; everything else is False.
    """
    if is_blank(value):
        return default_when_absent
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    text = clean_str(value).lower()
    return text in ("true", "1")


def parse_number(value: Any) -> float:
    """Parse a numeric cell, tolerating currency symbols and separators.

    Raises:
        MalformedCell: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise MalformedCell(value)
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = _NUMBER_NOISE.sub("", clean_str(value))
        try:
            number = float(text)
        except ValueError:
            raise MalformedCell(value) from None
    if not math.isfinite(number):
        raise MalformedCell(value)
    return number


def parse_price_type(value: Any) -> Optional[PriceType]:
    """Resolve a price-type cell to a PriceType, or None if unrecognized."""
    return _PRICE_TYPE_ALIASES.get(clean_str(value).lower())
