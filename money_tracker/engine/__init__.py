"""
Derived-metrics engine.

Pure computations over record snapshots: windowing, aggregation,
target planning, tier classification and insights.
"""

from money_tracker.engine.affirmations import AFFIRMATIONS, daily_affirmation
from money_tracker.engine.aggregator import (
    WINDOW_DAYS,
    bills_paid_this_month,
    bills_sorted,
    daily_rollup,
    flags_series,
    net,
    net_series,
    totals_30,
    totals_all,
    weekly_bills,
)
from money_tracker.engine.calendar import (
    DayKey,
    add_days,
    in_range,
    month_key,
    today_key,
    week_end,
    week_start,
)
from money_tracker.engine.classifier import TIERS, classify, evaluate_entry, tier_table
from money_tracker.engine.dashboard import build_dashboard
from money_tracker.engine.insights import generate_insights
from money_tracker.engine.planner import (
    default_planned_nights,
    plan_week,
    weekly_target,
)

__all__ = [
    # Calendar
    "DayKey",
    "add_days",
    "in_range",
    "month_key",
    "today_key",
    "week_end",
    "week_start",
    # Aggregation
    "WINDOW_DAYS",
    "bills_paid_this_month",
    "bills_sorted",
    "daily_rollup",
    "flags_series",
    "net",
    "net_series",
    "totals_30",
    "totals_all",
    "weekly_bills",
    # Planning
    "default_planned_nights",
    "plan_week",
    "weekly_target",
    # Classification
    "TIERS",
    "classify",
    "evaluate_entry",
    "tier_table",
    # Insights
    "generate_insights",
    # Affirmations
    "AFFIRMATIONS",
    "daily_affirmation",
    # Dashboard
    "build_dashboard",
]
