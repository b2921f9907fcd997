"""
Tests for Dancer Money Tracker

Test strategy:
1. Unit tests for individual components (models, engine functions)
2. Flow tests for the tracker over in-memory storage
3. No real files outside pytest's tmp_path
"""

import pytest
from datetime import datetime
from decimal import Decimal
from uuid import uuid4

from money_tracker.models.records import (
    Bill,
    Entry,
    EntryFlags,
    FlagName,
    TrackerSettings,
    WeekCheckIn,
    net_amount,
)
from money_tracker.validation import MAX_AMOUNT, safe_decimal
from money_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestEntryModel:
    """Tests for the Entry record and its boundary normalization."""

    def test_entry_creation(self):
        """Test Entry model creation."""
        entry = Entry(date="2024-01-01", gross=500, tipout=80, expenses=40)
        assert entry.date == "2024-01-01"
        assert entry.gross == Decimal("500")
        assert entry.net == Decimal("380")

    def test_entry_defaults(self):
        """Test a bare entry has an id, zero amounts and no flags."""
        entry = Entry()
        assert entry.id
        assert entry.date is None
        assert entry.gross == 0
        assert entry.min_kept is False
        assert entry.flags.count == 0

    def test_blank_and_junk_amounts_become_zero(self):
        """Test blank, missing and non-numeric amounts normalize to 0."""
        entry = Entry(gross="", tipout=None, expenses="abc")
        assert entry.gross == 0
        assert entry.tipout == 0
        assert entry.expenses == 0

    def test_numeric_strings_are_parsed(self):
        """Test amounts stored as strings are read as numbers."""
        entry = Entry(gross="1,250.50", tipout=" 50 ")
        assert entry.gross == Decimal("1250.50")
        assert entry.tipout == Decimal("50")

    def test_nan_and_infinity_become_zero(self):
        """Test non-finite floats normalize to 0."""
        entry = Entry(gross=float("nan"), tipout=float("inf"))
        assert entry.gross == 0
        assert entry.tipout == 0

    def test_oversized_amounts_are_capped(self):
        """Test huge but finite amounts are capped instead of overflowing later."""
        entry = Entry(gross="1e30", tipout=Decimal("9e999999"), expenses=10 ** 40)
        assert entry.gross == MAX_AMOUNT
        assert entry.tipout == MAX_AMOUNT
        assert entry.expenses == MAX_AMOUNT
        assert entry.net == -MAX_AMOUNT

    def test_negative_amounts_become_zero(self):
        """Test logged amounts are never negative."""
        entry = Entry(gross="-200", tipout=-5, expenses=Decimal("-0.01"))
        assert entry.gross == 0
        assert entry.tipout == 0
        assert entry.expenses == 0

    def test_net_can_be_negative(self):
        """Test net is not floored at zero."""
        assert Entry(gross=50, tipout=80, expenses=0).net == Decimal("-30")

    def test_malformed_date_becomes_none(self):
        """Test a date that is not a calendar day is dropped."""
        assert Entry(date="2024-02-30").date is None
        assert Entry(date="soon").date is None
        assert Entry(date="").date is None

    def test_timestamp_date_is_trimmed_to_day(self):
        """Test an ISO timestamp keeps only its day."""
        assert Entry(date="2024-03-05T22:10:00.000Z").date == "2024-03-05"

    def test_camel_case_storage_names(self):
        """Test camelCase storage names are accepted and emitted."""
        entry = Entry.model_validate({
            "id": "abc",
            "date": "2024-01-01",
            "gross": "300",
            "minKept": True,
            "leftEarly": "true",
            "flags": {"tired": True, "unsafe": False},
        })
        assert entry.min_kept is True
        assert entry.left_early is True
        dumped = entry.model_dump(by_alias=True)
        assert "minKept" in dumped
        assert "leftEarly" in dumped

    def test_entry_is_immutable(self):
        """Test records cannot be mutated in place."""
        entry = Entry(gross=100)
        with pytest.raises(ValueError):
            entry.gross = Decimal("200")


class TestEntryFlags:
    """Tests for the flags set."""

    def test_flag_count(self):
        flags = EntryFlags(tired=True, anxious=True)
        assert flags.count == 2
        assert flags.active() == (FlagName.TIRED, FlagName.ANXIOUS)

    def test_missing_flags_object(self):
        """Test a null flags object reads as no flags."""
        assert Entry(flags=None).flags.count == 0

    def test_flags_as_name_list(self):
        """Test a list of flag names is read as a set."""
        entry = Entry(flags=["unsafe", "Tired", "bogus"])
        assert entry.flags.unsafe is True
        assert entry.flags.tired is True
        assert entry.flags.count == 2

    def test_weak_flag_values(self):
        """Test string and numeric booleans."""
        flags = EntryFlags(tired="yes", anxious=0, disrespected="false", unsafe=[1])
        assert flags.tired is True
        assert flags.anxious is False
        assert flags.disrespected is False
        assert flags.unsafe is False


class TestBillModel:
    """Tests for the Bill record."""

    def test_bill_creation(self):
        bill = Bill(name="  Rent  ", amount="1200", due_date="2024-01-05")
        assert bill.name == "Rent"
        assert bill.amount == Decimal("1200")
        assert bill.due_date == "2024-01-05"
        assert bill.paid is False

    def test_bill_without_due_date(self):
        """Test a blank due date is None, not an empty string."""
        assert Bill(due_date="").due_date is None
        assert Bill.model_validate({"dueDate": None}).due_date is None

    def test_blank_id_gets_generated(self):
        assert Bill(id="").id

    def test_amount_bounds(self):
        """Test bill amounts are floored at 0 and capped at MAX_AMOUNT."""
        assert Bill(amount="-1200").amount == 0
        assert Bill(amount="1e30").amount == MAX_AMOUNT
        assert Bill.model_validate({"amount": "-9e999999"}).amount == 0


class TestTrackerSettings:
    """Tests for settings clamping."""

    def test_defaults(self):
        settings = TrackerSettings()
        assert settings.min_net_default == 250
        assert settings.buffer_percent == 10
        assert settings.expected_net_per_night == 300

    def test_buffer_percent_clamped(self):
        assert TrackerSettings(buffer_percent=150).buffer_percent == 100
        assert TrackerSettings(buffer_percent=-5).buffer_percent == 0

    def test_min_net_clamped(self):
        assert TrackerSettings(min_net_default=-1).min_net_default == 0
        assert TrackerSettings(min_net_default=5_000_000).min_net_default == 999999

    def test_expected_net_never_zero(self):
        """Test expected net per night is at least 1."""
        assert TrackerSettings(expected_net_per_night=0).expected_net_per_night == 1
        assert TrackerSettings(expected_net_per_night="").expected_net_per_night == 1

    def test_updated_clamps(self):
        """Test the update path clamps like construction does."""
        settings = TrackerSettings().updated(buffer_percent=150)
        assert settings.buffer_percent == 100
        assert settings.min_net_default == 250

    def test_camel_case_settings(self):
        settings = TrackerSettings.model_validate({
            "minNetDefault": 300,
            "bufferPercent": "15",
            "expectedNetPerNight": 400,
        })
        assert settings.min_net_default == 300
        assert settings.buffer_percent == 15
        assert settings.expected_net_per_night == 400


class TestWeekCheckIn:
    """Tests for the weekly check-in record."""

    def test_checkin_parses_timestamp(self):
        checkin = WeekCheckIn.model_validate({
            "reflection": "Left early twice, still hit target",
            "updatedAt": "2024-01-07T21:00:00.000Z",
        })
        assert isinstance(checkin.updated_at, datetime)

    def test_bad_timestamp_is_dropped(self):
        assert WeekCheckIn(updated_at="yesterday").updated_at is None

    def test_null_reflection(self):
        assert WeekCheckIn(reflection=None).reflection == ""


class TestNetAmount:
    """Tests for the net formula."""

    def test_net_formula(self):
        assert net_amount(500, 80, 40) == 380

    def test_negative_net(self):
        assert net_amount(50, 80, 0) == -30

    def test_negative_inputs_floored(self):
        assert net_amount(-100, 20, 0) == -20

    def test_blank_inputs(self):
        assert net_amount("", None, "x") == 0


class TestSafeDecimal:
    """Tests for signed decimal normalization."""

    def test_sign_is_kept(self):
        assert safe_decimal("-30") == Decimal("-30")

    def test_magnitude_is_bounded(self):
        assert safe_decimal("9e999999") == MAX_AMOUNT
        assert safe_decimal("-9e999999") == -MAX_AMOUNT
        assert safe_decimal(-(10 ** 50)) == -MAX_AMOUNT


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.ENTRY_ADDED,
            description="Entry added",
        )
        assert event.event_type == AuditEventType.ENTRY_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.BILL_ADDED,
            description="Bill added",
            details={"name": "Rent", "amount": "1200"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "bill_added"
        assert log_dict["details"]["name"] == "Rent"

    def test_record_added_builder(self):
        """Test AuditEventBuilder.record_added."""
        correlation_id = uuid4()
        event = AuditEventBuilder.record_added(
            entity_type="entry",
            entity_id="abc",
            details={"date": "2024-01-01"},
            correlation_id=correlation_id,
        )
        assert event.event_type == AuditEventType.ENTRY_ADDED
        assert event.entity_id == "abc"
        assert event.correlation_id == correlation_id
        assert event.is_user_action is True

    def test_record_removed_builder_for_bill(self):
        event = AuditEventBuilder.record_removed(entity_type="bill", entity_id="b1")
        assert event.event_type == AuditEventType.BILL_REMOVED

    def test_settings_updated_flags_clamped_values(self):
        """Test a clamped setting raises the event to a warning."""
        event = AuditEventBuilder.settings_updated(
            requested={"buffer_percent": 150},
            stored={"buffer_percent": Decimal("100")},
        )
        assert event.severity == AuditSeverity.WARNING
        assert event.details["clamped"] == ["buffer_percent"]

    def test_settings_updated_without_clamp(self):
        event = AuditEventBuilder.settings_updated(
            requested={"buffer_percent": 20},
            stored={"buffer_percent": Decimal("20")},
        )
        assert event.severity == AuditSeverity.INFO
        assert event.details["clamped"] == []

    def test_reflection_cleared_builder(self):
        event = AuditEventBuilder.reflection_saved(week_start="2024-01-01", length=0)
        assert event.event_type == AuditEventType.REFLECTION_CLEARED


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
