"""
Weekly Target Planner

Turns this week's unpaid bills into an income target:

    base   = unpaid bills due this week
    buffer = round(base * buffer_percent / 100)
    total  = base + buffer

and then into nights of work at the expected net per night.
"""

import math
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Optional

from money_tracker.models.records import TrackerSettings
from money_tracker.models.views import WeeklyBills, WeeklyPlan, WeeklyTarget
from money_tracker.validation.normalize import ZERO

MIN_PLANNED_NIGHTS = 1
MAX_PLANNED_NIGHTS = 7
FALLBACK_PLANNED_NIGHTS = 3

_WHOLE = Decimal("1")


def weekly_target(bills: WeeklyBills, settings: TrackerSettings) -> WeeklyTarget:
    """Compute the weekly target from the unpaid bills due this week."""
    unpaid = bills.unpaid
    base = sum((bill.amount for bill in unpaid), ZERO)

    pct = settings.buffer_percent
    buffer = (base * pct / 100).quantize(_WHOLE, rounding=ROUND_HALF_UP)
    total = base + buffer

    per_night = max(1, int(settings.expected_net_per_night.to_integral_value(rounding=ROUND_FLOOR)))
    nights = 0 if total <= 0 else math.ceil(total / per_night)

    return WeeklyTarget(
        base=base,
        buffer=buffer,
        total=total,
        buffer_percent=pct,
        per_night=per_night,
        nights_needed=nights,
        unpaid_count=len(unpaid),
        total_count=len(bills.rows),
    )


def _clamp_nights(nights: int) -> int:
    return max(MIN_PLANNED_NIGHTS, min(MAX_PLANNED_NIGHTS, nights))


def default_planned_nights(target: WeeklyTarget) -> int:
    """Nights needed clamped into 1-7, or 3 when nothing is needed."""
    if target.nights_needed > 0:
        return _clamp_nights(target.nights_needed)
    return FALLBACK_PLANNED_NIGHTS


def plan_week(target: WeeklyTarget, planned_nights: Optional[int] = None) -> WeeklyPlan:
    """
    Split the weekly total over a chosen number of nights.

    Planned nights are clamped into 1-7; the divisor is never below 1.
    """
    if planned_nights is None:
        nights = default_planned_nights(target)
    else:
        try:
            nights = _clamp_nights(int(planned_nights))
        except (TypeError, ValueError):
            nights = default_planned_nights(target)

    return WeeklyPlan(
        planned_nights=nights,
        per_night_planned=target.total / max(1, nights),
    )
