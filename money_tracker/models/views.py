"""
View Models

Read-only outputs of the engine, consumed by the presentation layer.
Plain immutable data: the only behavior is a few derived properties.
"""

from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from money_tracker.models.records import Bill, WeekCheckIn
from money_tracker.validation.normalize import ZERO, DayKey


class _View(BaseModel):
    model_config = ConfigDict(frozen=True)


# =============================================================================
# AGGREGATES
# =============================================================================

class DayBucket(_View):
    """Sums for every entry logged on one calendar day."""

    day: DayKey
    gross: Decimal = ZERO
    tipout: Decimal = ZERO
    expenses: Decimal = ZERO
    net: Decimal = ZERO
    min_hit_count: int = 0
    left_early_count: int = 0
    flags_count: int = 0


class Totals30(_View):
    """
    Rollup of the 30 daily buckets.

    ``min_hits``, ``left_early_days`` and ``flags_days`` count DAYS, not
    entries: a day with three qualifying entries counts once.
    """

    gross: Decimal = ZERO
    tipout: Decimal = ZERO
    expenses: Decimal = ZERO
    net: Decimal = ZERO
    min_hits: int = 0
    left_early_days: int = 0
    flags_days: int = 0


class TotalsAll(_View):
    """All-time sums over every logged entry, dated or not."""

    gross: Decimal = ZERO
    tipout: Decimal = ZERO
    expenses: Decimal = ZERO
    net: Decimal = ZERO
    min_kept: int = 0
    left_early: int = 0
    flags_total: int = 0
    entry_count: int = 0


class BillRow(_View):
    """A bill in the weekly window plus the running unpaid total up to it."""

    bill: Bill
    running_unpaid: Decimal = ZERO


class WeeklyBills(_View):
    """Bills due inside one Monday-Sunday window, sorted by due date."""

    week_start: DayKey
    week_end: DayKey
    rows: tuple[BillRow, ...] = ()

    @property
    def due(self) -> tuple[Bill, ...]:
        return tuple(row.bill for row in self.rows)

    @property
    def unpaid(self) -> tuple[Bill, ...]:
        return tuple(bill for bill in self.due if not bill.paid)

    @property
    def paid(self) -> tuple[Bill, ...]:
        return tuple(bill for bill in self.due if bill.paid)


class MonthlyBillsPaid(_View):
    """Paid bills whose due date falls in a given month."""

    month: str
    count: int = 0
    total: Decimal = ZERO


# =============================================================================
# PLANNING
# =============================================================================

class WeeklyTarget(_View):
    """Income needed this week: unpaid bills due plus a percentage buffer."""

    base: Decimal = ZERO
    buffer: Decimal = ZERO
    total: Decimal = ZERO
    buffer_percent: Decimal = ZERO
    per_night: int = 1
    nights_needed: int = 0
    unpaid_count: int = 0
    total_count: int = 0


class WeeklyPlan(_View):
    """Per-night amount for a user-chosen number of working nights."""

    planned_nights: int
    per_night_planned: Decimal = ZERO


# =============================================================================
# CLASSIFICATION
# =============================================================================

class NightTier(str, Enum):
    """
    Tier labels for a night's net.

    UNCLASSIFIED is returned for a net below every band (negative net).
    The caller decides how to render it.
    """
    DEAD = "Dead / Maintenance Night"
    BELOW_MINIMUM = "Below Minimum"
    MINIMUM_SECURED = "Minimum Secured"
    GOOD_MONEY = "Good Money"
    GREAT_NIGHT = "Great Night (Bossed Up)"
    UNCLASSIFIED = "unclassified"


class TierBand(_View):
    """One row of the tier table. ``upper`` of None means unbounded."""

    lower: Decimal
    upper: Optional[Decimal]
    tier: NightTier


class EntryView(_View):
    """Per-entry derived values shown next to each logged night."""

    entry_id: str
    date: Optional[DayKey] = None
    net: Decimal
    tier: NightTier
    hit_min: bool

    @property
    def is_classified(self) -> bool:
        return self.tier is not NightTier.UNCLASSIFIED


# =============================================================================
# INSIGHTS
# =============================================================================

class EnergyPattern(str, Enum):
    """Which money-energy narrative was selected."""
    NO_FLAGS = "no_flags"
    ENERGY_COST = "energy_cost"
    RESILIENCE = "resilience"
    STEADY = "steady"


class BossLevel(str, Enum):
    """Which consistency narrative was selected."""
    HIGH_CONSISTENCY = "high_consistency"
    BUILDING = "building"
    REBUILDING = "rebuilding"


class Insights(_View):
    """Narrative insights over the last 30 days, plus the numbers behind them."""

    energy_pattern: EnergyPattern
    money_energy_line: str
    boss_level: BossLevel
    boss_line: str
    avg_flagged: Decimal = ZERO
    avg_calm: Decimal = ZERO
    diff: Decimal = ZERO
    hit_rate_pct: float = 0.0
    flagged_days: int = 0
    calm_days: int = 0


# =============================================================================
# DASHBOARD
# =============================================================================

class Dashboard(_View):
    """Everything one recompute pass produces."""

    today: DayKey
    week_start: DayKey
    week_end: DayKey
    last30: tuple[DayBucket, ...]
    totals30: Totals30
    totals_all: TotalsAll
    weekly_bills: WeeklyBills
    weekly_target: WeeklyTarget
    weekly_plan: WeeklyPlan
    insights: Insights
    entries: tuple[EntryView, ...] = ()
    bills: tuple[Bill, ...] = ()
    bills_paid_this_month: MonthlyBillsPaid
    checkin: WeekCheckIn
    affirmation: str
