"""
Data Models Package

This package contains all Pydantic models used in the Dancer Money Tracker.
Records are what the user logs; views are what the engine derives.
"""

from money_tracker.models.records import (
    Bill,
    Entry,
    EntryFlags,
    FlagName,
    TrackerSettings,
    TrackerSnapshot,
    WeekCheckIn,
    net_amount,
    new_record_id,
)
from money_tracker.models.views import (
    BillRow,
    BossLevel,
    Dashboard,
    DayBucket,
    EnergyPattern,
    EntryView,
    Insights,
    MonthlyBillsPaid,
    NightTier,
    TierBand,
    Totals30,
    TotalsAll,
    WeeklyBills,
    WeeklyPlan,
    WeeklyTarget,
)
from money_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Record models
    "Bill",
    "Entry",
    "EntryFlags",
    "FlagName",
    "TrackerSettings",
    "TrackerSnapshot",
    "WeekCheckIn",
    "net_amount",
    "new_record_id",
    # View models
    "BillRow",
    "BossLevel",
    "Dashboard",
    "DayBucket",
    "EnergyPattern",
    "EntryView",
    "Insights",
    "MonthlyBillsPaid",
    "NightTier",
    "TierBand",
    "Totals30",
    "TotalsAll",
    "WeeklyBills",
    "WeeklyPlan",
    "WeeklyTarget",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
