"""
Boundary Normalization

Stored records arrive weakly typed: amounts may be strings, blanks or junk,
dates may be missing or malformed, booleans may be "true" or 1.

DESIGN DECISION: Normalization happens ONCE, at the record boundary.
Everything inward of the models sees clean Decimals, canonical day keys
and real booleans. Nothing here raises.
"""

from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

ZERO = Decimal("0")

# Largest magnitude any single amount may carry. Sums of a few thousand such
# amounts stay well inside the default 28-digit decimal context.
MAX_AMOUNT = Decimal("999999999")

# Calendar day as an ISO YYYY-MM-DD string
DayKey = str

_TRUE_STRINGS = {"true", "1", "yes", "y", "on"}


def safe_decimal(value: Any) -> Decimal:
    """
    Convert a weakly-typed monetary value to a Decimal.

    Blank, missing, non-numeric, NaN and infinite values all become 0.
    Finite values are bounded to [-MAX_AMOUNT, MAX_AMOUNT].
    """
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        return _bounded(value) if value.is_finite() else ZERO
    if isinstance(value, int):
        return _bounded(Decimal(value))
    if isinstance(value, float):
        # str() keeps 0.1 as 0.1 instead of the binary expansion
        value = str(value)
    if isinstance(value, str):
        text = value.strip().replace(",", "")
        if not text:
            return ZERO
        try:
            parsed = Decimal(text)
        except InvalidOperation:
            return ZERO
        return _bounded(parsed) if parsed.is_finite() else ZERO
    return ZERO


def _bounded(value: Decimal) -> Decimal:
    return max(-MAX_AMOUNT, min(MAX_AMOUNT, value))


def safe_amount(value: Any) -> Decimal:
    """A monetary amount as logged: normalized, never negative."""
    return clamp_decimal(value, ZERO, MAX_AMOUNT)


def clamp_decimal(value: Any, low: Decimal, high: Decimal) -> Decimal:
    """Normalize then clamp into [low, high]."""
    return max(low, min(high, safe_decimal(value)))


def safe_flag(value: Any) -> bool:
    """Interpret a weakly-typed boolean. Unknown values are False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def safe_text(value: Any) -> str:
    """Free text; None becomes the empty string."""
    if value is None:
        return ""
    return str(value)


def to_day_key(value: Any) -> Optional[str]:
    """
    Canonicalize a calendar day to an ISO ``YYYY-MM-DD`` key.

    Accepts date/datetime objects and ISO strings (a trailing time part is
    ignored). Anything that does not name a real calendar day yields None.
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if not isinstance(value, str):
        return None
    text = value.strip()[:10]
    if len(text) != 10:
        return None
    try:
        return date.fromisoformat(text).isoformat()
    except ValueError:
        return None
