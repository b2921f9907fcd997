"""Boundary normalization package."""

from money_tracker.validation.normalize import (
    MAX_AMOUNT,
    ZERO,
    DayKey,
    clamp_decimal,
    safe_amount,
    safe_decimal,
    safe_flag,
    safe_text,
    to_day_key,
)

__all__ = [
    "MAX_AMOUNT",
    "ZERO",
    "DayKey",
    "clamp_decimal",
    "safe_amount",
    "safe_decimal",
    "safe_flag",
    "safe_text",
    "to_day_key",
]
