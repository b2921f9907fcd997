"""
Record Models for Dancer Money Tracker

These models define the shapes of everything the user logs:
nightly entries, bills, settings and weekly check-ins.

They are designed to:
1. Normalize weakly-typed stored values at the boundary
2. Be immutable snapshots (the engine only reads them)
3. Round-trip the browser app's camelCase storage format

DESIGN DECISION: Unlike strict validation, these models NEVER reject a
stored record for a bad amount or date. Bad or negative amounts become 0,
oversized ones are capped at MAX_AMOUNT, bad dates become "no date".
A record that cannot be read at all is skipped by the store, not by
the model.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from money_tracker.validation.normalize import (
    ZERO,
    DayKey,
    clamp_decimal,
    safe_amount,
    safe_flag,
    safe_text,
    to_day_key,
)


# =============================================================================
# LIMITS & DEFAULTS
# =============================================================================

DEFAULT_MIN_NET = Decimal("250")
DEFAULT_BUFFER_PERCENT = Decimal("10")
DEFAULT_EXPECTED_NET_PER_NIGHT = Decimal("300")

MIN_NET_RANGE = (Decimal("0"), Decimal("999999"))
BUFFER_PERCENT_RANGE = (Decimal("0"), Decimal("100"))
# Never 0: nights-needed divides by it
EXPECTED_NET_RANGE = (Decimal("1"), Decimal("999999"))


def new_record_id() -> str:
    """Opaque unique token for a new entry or bill."""
    return uuid4().hex


def net_amount(gross: Any, tipout: Any, expenses: Any) -> Decimal:
    """Net for one night: gross - tipout - expenses. May be negative."""
    return safe_amount(gross) - safe_amount(tipout) - safe_amount(expenses)


class _Record(BaseModel):
    """Shared config: frozen, camelCase aliases, unknown keys ignored."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# =============================================================================
# ENTRY - one logged night
# =============================================================================

class FlagName(str, Enum):
    """Energy flags a night can carry."""
    TIRED = "tired"
    ANXIOUS = "anxious"
    DISRESPECTED = "disrespected"
    UNSAFE = "unsafe"


class EntryFlags(_Record):
    """The set of energy flags checked for a night."""

    tired: bool = False
    anxious: bool = False
    disrespected: bool = False
    unsafe: bool = False

    @field_validator("tired", "anxious", "disrespected", "unsafe", mode="before")
    @classmethod
    def coerce_flag(cls, v: Any) -> bool:
        return safe_flag(v)

    def active(self) -> tuple[FlagName, ...]:
        """Flags that are checked, in fixed order."""
        return tuple(flag for flag in FlagName if getattr(self, flag.value))

    @property
    def count(self) -> int:
        return len(self.active())


class Entry(_Record):
    """
    One logged night.

    ``date`` is not unique: several entries may share a day and are
    summed by the aggregator. An entry without a date still counts
    toward all-time totals but never enters a dated window.
    """

    id: str = Field(default_factory=new_record_id)
    date: Optional[DayKey] = None
    gross: Decimal = ZERO
    tipout: Decimal = ZERO
    expenses: Decimal = ZERO
    min_kept: bool = False
    left_early: bool = False
    flags: EntryFlags = Field(default_factory=EntryFlags)
    notes: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def ensure_id(cls, v: Any) -> str:
        text = safe_text(v).strip()
        return text or new_record_id()

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> Optional[str]:
        return to_day_key(v)

    @field_validator("gross", "tipout", "expenses", mode="before")
    @classmethod
    def normalize_amount(cls, v: Any) -> Decimal:
        return safe_amount(v)

    @field_validator("min_kept", "left_early", mode="before")
    @classmethod
    def normalize_bool(cls, v: Any) -> bool:
        return safe_flag(v)

    @field_validator("flags", mode="before")
    @classmethod
    def normalize_flags(cls, v: Any) -> Any:
        if v is None:
            return {}
        # A plain collection of names is a set of checked flags
        if isinstance(v, (list, tuple, set, frozenset)):
            names = {str(name).strip().lower() for name in v}
            return {flag.value: flag.value in names for flag in FlagName}
        if isinstance(v, (dict, EntryFlags)):
            return v
        return {}

    @field_validator("notes", mode="before")
    @classmethod
    def normalize_notes(cls, v: Any) -> str:
        return safe_text(v)

    @property
    def net(self) -> Decimal:
        return net_amount(self.gross, self.tipout, self.expenses)


# =============================================================================
# BILL
# =============================================================================

class Bill(_Record):
    """
    A recurring bill.

    Bills without a due date stay in the full list but never enter a
    weekly or monthly window.
    """

    id: str = Field(default_factory=new_record_id)
    name: str = ""
    amount: Decimal = ZERO
    due_date: Optional[DayKey] = None
    paid: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def ensure_id(cls, v: Any) -> str:
        text = safe_text(v).strip()
        return text or new_record_id()

    @field_validator("name", mode="before")
    @classmethod
    def normalize_name(cls, v: Any) -> str:
        return safe_text(v).strip()

    @field_validator("amount", mode="before")
    @classmethod
    def normalize_amount(cls, v: Any) -> Decimal:
        return safe_amount(v)

    @field_validator("due_date", mode="before")
    @classmethod
    def normalize_due_date(cls, v: Any) -> Optional[str]:
        return to_day_key(v)

    @field_validator("paid", mode="before")
    @classmethod
    def normalize_paid(cls, v: Any) -> bool:
        return safe_flag(v)


# =============================================================================
# SETTINGS
# =============================================================================

class TrackerSettings(_Record):
    """
    User-level settings. Single instance per tracker.

    CRITICAL: Values are clamped on EVERY construction, including updates,
    so downstream math never sees an out-of-range value. Use ``updated()``
    rather than ``model_copy(update=...)``, which skips validation.
    """

    min_net_default: Decimal = DEFAULT_MIN_NET
    buffer_percent: Decimal = DEFAULT_BUFFER_PERCENT
    expected_net_per_night: Decimal = DEFAULT_EXPECTED_NET_PER_NIGHT

    @field_validator("min_net_default", mode="before")
    @classmethod
    def clamp_min_net(cls, v: Any) -> Decimal:
        return clamp_decimal(v, *MIN_NET_RANGE)

    @field_validator("buffer_percent", mode="before")
    @classmethod
    def clamp_buffer_percent(cls, v: Any) -> Decimal:
        return clamp_decimal(v, *BUFFER_PERCENT_RANGE)

    @field_validator("expected_net_per_night", mode="before")
    @classmethod
    def clamp_expected_net(cls, v: Any) -> Decimal:
        return clamp_decimal(v, *EXPECTED_NET_RANGE)

    def updated(self, **changes: Any) -> "TrackerSettings":
        """Return a new settings value with ``changes`` applied and clamped."""
        return TrackerSettings.model_validate({**self.model_dump(), **changes})


# =============================================================================
# WEEKLY CHECK-IN
# =============================================================================

class WeekCheckIn(_Record):
    """Sunday reflection, keyed by week-start day key in the store."""

    reflection: str = ""
    updated_at: Optional[datetime] = None

    @field_validator("reflection", mode="before")
    @classmethod
    def normalize_reflection(cls, v: Any) -> str:
        return safe_text(v)

    @field_validator("updated_at", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Optional[datetime]:
        if v is None or isinstance(v, datetime):
            return v
        if isinstance(v, str) and v.strip():
            try:
                return datetime.fromisoformat(v.strip().replace("Z", "+00:00"))
            except ValueError:
                return None
        return None


# =============================================================================
# SNAPSHOT
# =============================================================================

class TrackerSnapshot(BaseModel):
    """
    Everything the engine reads for one recompute pass.

    The host builds one of these after serializing its writes, so the
    engine never sees a half-applied change.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[Entry, ...] = ()
    bills: tuple[Bill, ...] = ()
    settings: TrackerSettings = Field(default_factory=TrackerSettings)
    checkins: dict[DayKey, WeekCheckIn] = Field(default_factory=dict)
