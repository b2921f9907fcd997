"""
Aggregation Engine

Rolls logged records into fixed windows:
1. A 30-day daily series of entry sums, always exactly 30 buckets
2. Totals over that series and over all entries
3. The full bill list in due-date order
4. The set of bills due inside a Monday-Sunday week

Every function here is pure: it reads records and returns freshly built
view models. Calling twice on the same input yields identical output.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from money_tracker.engine.calendar import DayKey, add_days, in_range, month_key
from money_tracker.models.records import Bill, Entry, net_amount
from money_tracker.models.views import (
    BillRow,
    DayBucket,
    MonthlyBillsPaid,
    Totals30,
    TotalsAll,
    WeeklyBills,
)
from money_tracker.validation.normalize import ZERO

WINDOW_DAYS = 30

# Re-exported so callers can compute a single night's net without a record
net = net_amount


def daily_rollup(
    entries: Iterable[Entry],
    min_net: Decimal,
    today: DayKey,
) -> tuple[DayBucket, ...]:
    """
    Sum entries into one bucket per day for ``[today - 29, today]``.

    Entries sharing a date are summed, never overwritten. Days with no
    entries get an all-zero bucket, so the result is never sparse.
    """
    start = add_days(today, -(WINDOW_DAYS - 1))
    days = [add_days(start, i) for i in range(WINDOW_DAYS)]
    window = set(days)

    sums: dict[DayKey, dict] = defaultdict(lambda: {
        "gross": ZERO,
        "tipout": ZERO,
        "expenses": ZERO,
        "net": ZERO,
        "min_hit_count": 0,
        "left_early_count": 0,
        "flags_count": 0,
    })

    for entry in entries:
        if entry.date is None or entry.date not in window:
            continue
        bucket = sums[entry.date]
        entry_net = entry.net
        bucket["gross"] += entry.gross
        bucket["tipout"] += entry.tipout
        bucket["expenses"] += entry.expenses
        bucket["net"] += entry_net
        bucket["min_hit_count"] += 1 if entry_net >= min_net else 0
        bucket["left_early_count"] += 1 if entry.left_early else 0
        bucket["flags_count"] += entry.flags.count

    return tuple(
        DayBucket(day=day, **sums[day]) if day in sums else DayBucket(day=day)
        for day in days
    )


def totals_30(buckets: Sequence[DayBucket]) -> Totals30:
    """
    Reduce daily buckets to window totals.

    Count fields are day-level: a day counts once if its per-day count
    is above zero, however many entries contributed.
    """
    return Totals30(
        gross=sum((b.gross for b in buckets), ZERO),
        tipout=sum((b.tipout for b in buckets), ZERO),
        expenses=sum((b.expenses for b in buckets), ZERO),
        net=sum((b.net for b in buckets), ZERO),
        min_hits=sum(1 for b in buckets if b.min_hit_count > 0),
        left_early_days=sum(1 for b in buckets if b.left_early_count > 0),
        flags_days=sum(1 for b in buckets if b.flags_count > 0),
    )


def totals_all(entries: Sequence[Entry]) -> TotalsAll:
    """All-time totals over every entry, including undated ones."""
    return TotalsAll(
        gross=sum((e.gross for e in entries), ZERO),
        tipout=sum((e.tipout for e in entries), ZERO),
        expenses=sum((e.expenses for e in entries), ZERO),
        net=sum((e.net for e in entries), ZERO),
        min_kept=sum(1 for e in entries if e.min_kept),
        left_early=sum(1 for e in entries if e.left_early),
        flags_total=sum(e.flags.count for e in entries),
        entry_count=len(entries),
    )


def bills_sorted(bills: Iterable[Bill]) -> tuple[Bill, ...]:
    """
    Every bill, ascending by due date, undated bills first.

    Bills due the same day keep their insertion order.
    """
    return tuple(sorted(bills, key=lambda bill: bill.due_date or ""))


def weekly_bills(
    bills: Iterable[Bill],
    week_start: DayKey,
    week_end: DayKey,
) -> WeeklyBills:
    """
    Bills due inside ``[week_start, week_end]``, ascending by due date.

    Bills without a due date are excluded. ``sorted`` is stable, so bills
    due the same day keep their insertion order.
    """
    due = sorted(
        (
            bill for bill in bills
            if bill.due_date is not None
            and in_range(bill.due_date, week_start, week_end)
        ),
        key=lambda bill: bill.due_date,
    )

    rows = []
    running = ZERO
    for bill in due:
        if not bill.paid:
            running += bill.amount
        rows.append(BillRow(bill=bill, running_unpaid=running))

    return WeeklyBills(week_start=week_start, week_end=week_end, rows=tuple(rows))


def bills_paid_this_month(bills: Iterable[Bill], today: DayKey) -> MonthlyBillsPaid:
    """Paid bills whose due date falls in the same month as ``today``."""
    month = month_key(today)
    paid = [
        bill for bill in bills
        if bill.paid and bill.due_date is not None and month_key(bill.due_date) == month
    ]
    return MonthlyBillsPaid(
        month=month,
        count=len(paid),
        total=sum((bill.amount for bill in paid), ZERO),
    )


def net_series(buckets: Sequence[DayBucket]) -> list[Decimal]:
    """Per-day net, oldest first. Chart input."""
    return [bucket.net for bucket in buckets]


def flags_series(buckets: Sequence[DayBucket]) -> list[int]:
    """Per-day flag counts, oldest first. Chart input."""
    return [bucket.flags_count for bucket in buckets]
