"""
Insight Generator

Two deliberately simple heuristics over the last 30 days:

1. Money-energy: compare average net on flagged days against calm days.
2. Boss: how often the minimum net was hit.

These are fixed-threshold lookups, not models. No learning, no config.
"""

from decimal import Decimal
from typing import Sequence

from money_tracker.engine.aggregator import WINDOW_DAYS
from money_tracker.models.views import BossLevel, DayBucket, EnergyPattern, Insights
from money_tracker.validation.normalize import ZERO

ENERGY_DIFF_THRESHOLD = Decimal("25")
HIGH_CONSISTENCY_PCT = 70.0
BUILDING_CONSISTENCY_PCT = 40.0

MONEY_ENERGY_LINES = {
    EnergyPattern.NO_FLAGS: "No flags logged this month, that's self-control and peace.",
    EnergyPattern.ENERGY_COST: (
        "When flags are checked, your average net is lower by about {diff}. "
        "Protecting your energy protects your bag."
    ),
    EnergyPattern.RESILIENCE: (
        "Even on flagged nights, you still performed. "
        "That's resilience, but don't normalize burnout."
    ),
    EnergyPattern.STEADY: (
        "Your net is fairly steady whether flags happen or not. "
        "Keep boundaries tight and money stays consistent."
    ),
}

BOSS_LINES = {
    BossLevel.HIGH_CONSISTENCY: "Boss behavior: you hit your minimum most nights. Keep that standard.",
    BossLevel.BUILDING: "You're building consistency. Tighten the plan and protect your energy.",
    BossLevel.REBUILDING: (
        "No shame, just data. This month is for rebuilding your standard, "
        "one night at a time."
    ),
}


def format_usd(amount: Decimal) -> str:
    """Dollar formatting used inside narrative lines."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"


def average_net(days: Sequence[DayBucket]) -> Decimal:
    """Mean net over the given days; 0 for no days."""
    if not days:
        return ZERO
    return sum((day.net for day in days), ZERO) / len(days)


def energy_pattern(flagged_days: int, diff: Decimal) -> EnergyPattern:
    # No flags at all short-circuits before the diff is looked at
    if flagged_days == 0:
        return EnergyPattern.NO_FLAGS
    if diff > ENERGY_DIFF_THRESHOLD:
        return EnergyPattern.ENERGY_COST
    if diff < -ENERGY_DIFF_THRESHOLD:
        return EnergyPattern.RESILIENCE
    return EnergyPattern.STEADY


def boss_level(hit_rate_pct: float) -> BossLevel:
    if hit_rate_pct >= HIGH_CONSISTENCY_PCT:
        return BossLevel.HIGH_CONSISTENCY
    if hit_rate_pct >= BUILDING_CONSISTENCY_PCT:
        return BossLevel.BUILDING
    return BossLevel.REBUILDING


def generate_insights(buckets: Sequence[DayBucket], min_hits: int) -> Insights:
    """
    Build the money-energy and boss narratives.

    Args:
        buckets: The 30 daily buckets from the rollup
        min_hits: Days in the window where the minimum was hit at least once

    Returns:
        Insights with both narratives and the numbers behind them
    """
    flagged = [day for day in buckets if day.flags_count > 0]
    calm = [day for day in buckets if day.flags_count == 0]

    avg_flagged = average_net(flagged)
    avg_calm = average_net(calm)
    diff = avg_calm - avg_flagged

    hit_rate_pct = min_hits * 100 / WINDOW_DAYS

    pattern = energy_pattern(len(flagged), diff)
    level = boss_level(hit_rate_pct)

    return Insights(
        energy_pattern=pattern,
        money_energy_line=MONEY_ENERGY_LINES[pattern].format(diff=format_usd(diff)),
        boss_level=level,
        boss_line=BOSS_LINES[level],
        avg_flagged=avg_flagged,
        avg_calm=avg_calm,
        diff=diff,
        hit_rate_pct=hit_rate_pct,
        flagged_days=len(flagged),
        calm_days=len(calm),
    )
