"""
Dashboard Builder

One recompute pass over a snapshot. The host calls this after any change
to entries, bills, settings or check-ins; it is safe to call repeatedly
and returns the same result for the same snapshot and day.
"""

from typing import Optional

from money_tracker.engine.affirmations import daily_affirmation
from money_tracker.engine.aggregator import (
    bills_paid_this_month,
    bills_sorted,
    daily_rollup,
    totals_30,
    totals_all,
    weekly_bills,
)
from money_tracker.engine.calendar import DayKey, today_key, week_end, week_start
from money_tracker.engine.classifier import evaluate_entry
from money_tracker.engine.insights import generate_insights
from money_tracker.engine.planner import plan_week, weekly_target
from money_tracker.models.records import TrackerSnapshot, WeekCheckIn
from money_tracker.models.views import Dashboard


def build_dashboard(
    snapshot: TrackerSnapshot,
    today: Optional[DayKey] = None,
    planned_nights: Optional[int] = None,
) -> Dashboard:
    """
    Compute every view model for ``today`` (defaults to the local day).

    Args:
        snapshot: Records to read. Never mutated.
        today: Day key the windows are anchored on
        planned_nights: User-chosen nights for the weekly plan.
                        None uses the default derived from the target.
    """
    today = today or today_key()
    settings = snapshot.settings
    start = week_start(today)
    end = week_end(start)

    last30 = daily_rollup(snapshot.entries, settings.min_net_default, today)
    totals30 = totals_30(last30)
    week_bills = weekly_bills(snapshot.bills, start, end)
    target = weekly_target(week_bills, settings)

    return Dashboard(
        today=today,
        week_start=start,
        week_end=end,
        last30=last30,
        totals30=totals30,
        totals_all=totals_all(snapshot.entries),
        weekly_bills=week_bills,
        weekly_target=target,
        weekly_plan=plan_week(target, planned_nights),
        insights=generate_insights(last30, totals30.min_hits),
        # Newest logged first
        bills=bills_sorted(snapshot.bills),
        entries=tuple(
            evaluate_entry(entry, settings.min_net_default)
            for entry in reversed(snapshot.entries)
        ),
        bills_paid_this_month=bills_paid_this_month(snapshot.bills, today),
        checkin=snapshot.checkins.get(start) or WeekCheckIn(),
        affirmation=daily_affirmation(today),
    )
