"""
Flow tests for the tracker service over in-memory storage.

The clock is pinned to Wednesday 2024-01-31 so week and window math
is deterministic.
"""

import pytest
from decimal import Decimal

from money_tracker.audit import AuditLogger
from money_tracker.config import AppSettings
from money_tracker.models.audit import AuditEventType, AuditSeverity
from money_tracker.models.records import TrackerSettings
from money_tracker.storage import (
    BILLS_KEY,
    ENTRIES_KEY,
    InMemoryAuditStorage,
    InMemoryRecordStore,
    JsonFileRecordStore,
    NotFoundError,
    StorageError,
)
from money_tracker.tracker import MoneyTracker, apply_patch, create_tracker

TODAY = "2024-01-31"
MONDAY = "2024-01-29"


class FailingRecordStore(InMemoryRecordStore):
    """Store whose writes always fail."""

    def save_entries(self, entries):
        raise StorageError("disk full")


class BrokenAuditStorage(InMemoryAuditStorage):
    def append_event(self, event):
        raise OSError("read-only")


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def store():
    return InMemoryRecordStore()


@pytest.fixture
def tracker(store, audit_storage):
    return MoneyTracker(
        store,
        audit_logger=AuditLogger(audit_storage),
        clock=lambda: TODAY,
    )


def _event_types(audit_storage):
    return [event.event_type for event in audit_storage.events]


class TestEntries:
    """Tests for logging nights."""

    def test_add_entry_defaults_to_today(self, tracker, store):
        entry = tracker.add_entry(gross=500, tipout=80, expenses=40)
        assert entry.date == TODAY
        assert entry.net == Decimal("380")
        assert tracker.snapshot.entries == (entry,)
        assert store.load_entries() == [entry]

    def test_add_entry_is_audited(self, tracker, audit_storage):
        entry = tracker.add_entry()
        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.ENTRY_ADDED
        assert event.entity_id == entry.id

    def test_update_entry(self, tracker, store):
        entry = tracker.add_entry(gross=100)
        updated = tracker.update_entry(entry.id, gross="450", leftEarly=True)
        assert updated.id == entry.id
        assert updated.gross == Decimal("450")
        assert updated.left_early is True
        assert store.load_entries()[0].gross == Decimal("450")

    def test_update_merges_flags(self, tracker):
        entry = tracker.add_entry(flags={"tired": True})
        updated = tracker.update_entry(entry.id, flags={"unsafe": True})
        assert updated.flags.tired is True
        assert updated.flags.unsafe is True

    def test_update_never_changes_id(self, tracker):
        entry = tracker.add_entry()
        assert tracker.update_entry(entry.id, id="other").id == entry.id

    def test_update_unknown_field_rejected(self, tracker):
        entry = tracker.add_entry()
        with pytest.raises(ValueError):
            tracker.update_entry(entry.id, tips=20)

    def test_update_unknown_id(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.update_entry("nope", gross=1)

    def test_remove_entry(self, tracker, audit_storage):
        keep = tracker.add_entry()
        drop = tracker.add_entry()
        tracker.remove_entry(drop.id)
        assert tracker.snapshot.entries == (keep,)
        assert _event_types(audit_storage)[-1] == AuditEventType.ENTRY_REMOVED

    def test_remove_unknown_id(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.remove_entry("nope")

    def test_failed_save_keeps_snapshot(self, audit_storage):
        tracker = MoneyTracker(
            FailingRecordStore(),
            audit_logger=AuditLogger(audit_storage),
            clock=lambda: TODAY,
        )
        with pytest.raises(StorageError):
            tracker.add_entry(gross=100)
        assert tracker.snapshot.entries == ()
        failed = audit_storage.events[-1]
        assert failed.event_type == AuditEventType.SAVE_FAILED
        assert failed.error_message == "disk full"


class TestBills:
    """Tests for bill management."""

    def test_add_bill_defaults(self, tracker):
        bill = tracker.add_bill(name="Rent", amount=1200)
        assert bill.due_date == TODAY
        assert bill.paid is False

    def test_mark_paid_and_unpaid(self, tracker, store):
        bill = tracker.add_bill(name="Rent", amount=500)
        assert tracker.mark_bill_paid(bill.id).paid is True
        assert store.load_bills()[0].paid is True
        assert tracker.mark_bill_paid(bill.id, paid=False).paid is False

    def test_update_bill_with_storage_name(self, tracker):
        bill = tracker.add_bill(name="Phone")
        assert tracker.update_bill(bill.id, dueDate="2024-02-15").due_date == "2024-02-15"

    def test_clear_due_date(self, tracker):
        bill = tracker.add_bill(name="Phone")
        assert tracker.update_bill(bill.id, due_date="").due_date is None

    def test_remove_bill(self, tracker, audit_storage):
        bill = tracker.add_bill()
        tracker.remove_bill(bill.id)
        assert tracker.snapshot.bills == ()
        assert _event_types(audit_storage)[-1] == AuditEventType.BILL_REMOVED

    def test_unknown_bill(self, tracker):
        with pytest.raises(NotFoundError):
            tracker.mark_bill_paid("nope")
        with pytest.raises(NotFoundError):
            tracker.remove_bill("nope")


class TestSettings:
    """Tests for settings updates."""

    def test_buffer_over_100_stored_as_100(self, tracker, store, audit_storage):
        settings = tracker.update_settings(buffer_percent=150)
        assert settings.buffer_percent == 100
        assert store.load_settings().buffer_percent == 100

        event = audit_storage.events[-1]
        assert event.event_type == AuditEventType.SETTINGS_UPDATED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["clamped"] == ["buffer_percent"]

    def test_in_range_update(self, tracker, audit_storage):
        settings = tracker.update_settings(minNetDefault=300)
        assert settings.min_net_default == 300
        assert settings.buffer_percent == 10
        assert audit_storage.events[-1].severity == AuditSeverity.INFO

    def test_unknown_setting_rejected(self, tracker):
        with pytest.raises(ValueError):
            tracker.update_settings(theme="dark")

    def test_default_settings_used_when_store_empty(self, store):
        tracker = MoneyTracker(store, default_settings=TrackerSettings(min_net_default=400))
        assert tracker.settings.min_net_default == 400

    def test_stored_settings_win_over_defaults(self):
        store = InMemoryRecordStore()
        store.save_settings(TrackerSettings(min_net_default=100))
        tracker = MoneyTracker(store, default_settings=TrackerSettings(min_net_default=400))
        assert tracker.settings.min_net_default == 100


class TestCheckIns:
    """Tests for the Sunday reflection."""

    def test_save_reflection_for_current_week(self, tracker, store):
        checkin = tracker.save_reflection("Protected my energy")
        assert tracker.current_week_start() == MONDAY
        assert tracker.checkin_for_week().reflection == "Protected my energy"
        assert checkin.updated_at is not None
        assert store.load_checkins()[MONDAY].reflection == "Protected my energy"

    def test_overwrite_reflection(self, tracker):
        tracker.save_reflection("first")
        tracker.save_reflection("second")
        assert tracker.checkin_for_week().reflection == "second"

    def test_clear_reflection(self, tracker, audit_storage):
        tracker.save_reflection("something")
        tracker.clear_reflection()
        assert tracker.checkin_for_week().reflection == ""
        assert MONDAY in tracker.snapshot.checkins
        assert _event_types(audit_storage)[-1] == AuditEventType.REFLECTION_CLEARED

    def test_unknown_week_is_empty(self, tracker):
        assert tracker.checkin_for_week("2020-01-06").reflection == ""

    def test_explicit_week(self, tracker):
        tracker.save_reflection("old week", "2024-01-22")
        assert tracker.checkin_for_week("2024-01-22").reflection == "old week"
        assert tracker.checkin_for_week().reflection == ""


class TestDashboardFlow:
    """End-to-end: edits flow into the dashboard."""

    def test_dashboard_reflects_changes(self, tracker):
        tracker.add_entry(gross=500, tipout=80, expenses=40)
        rent = tracker.add_bill(name="Rent", amount=500, due_date="2024-02-02")

        dashboard = tracker.dashboard()
        assert dashboard.today == TODAY
        assert dashboard.totals30.net == Decimal("380")
        assert dashboard.weekly_target.total == Decimal("550")
        assert dashboard.weekly_target.nights_needed == 2

        tracker.mark_bill_paid(rent.id)
        assert tracker.dashboard().weekly_target.total == 0

    def test_reload_from_store(self, tracker, store):
        tracker.add_entry(gross=300)
        tracker.add_bill(name="Rent")
        reloaded = MoneyTracker(store, clock=lambda: TODAY)
        assert reloaded.snapshot == tracker.snapshot

    def test_load_is_audited(self, store, audit_storage):
        store.data[ENTRIES_KEY] = [{"gross": 1}]
        store.data[BILLS_KEY] = []
        MoneyTracker(store, audit_logger=AuditLogger(audit_storage))
        loaded = audit_storage.events[0]
        assert loaded.event_type == AuditEventType.RECORDS_LOADED
        assert loaded.details["entries"] == 1


class TestAuditLogger:
    """Tests for audit logging failure handling."""

    def test_storage_failure_does_not_raise(self):
        logger = AuditLogger(BrokenAuditStorage())
        tracker = MoneyTracker(InMemoryRecordStore(), audit_logger=logger)
        entry = tracker.add_entry()
        assert tracker.snapshot.entries == (entry,)

    def test_log_without_storage(self):
        from money_tracker.models.audit import AuditEventBuilder

        assert AuditLogger().log(AuditEventBuilder.record_added("entry", "e1", {})) is True


class TestApplyPatch:
    """Tests for the record patch helper."""

    def test_patch_revalidates(self):
        settings = apply_patch(TrackerSettings(), {"expected_net_per_night": -5})
        assert settings.expected_net_per_night == 1

    def test_patch_rejects_unknown(self):
        with pytest.raises(ValueError):
            apply_patch(TrackerSettings(), {"colour": "pink"})


class TestCreateTracker:
    """Tests for the factory."""

    def test_create_tracker_from_settings(self, tmp_path):
        settings = AppSettings(
            data_path=tmp_path / "tracker.json",
            audit_log_path=tmp_path / "audit.jsonl",
            default_min_net=275,
        )
        tracker = create_tracker(settings)
        assert tracker.settings.min_net_default == 275

        tracker.add_entry(gross=100)
        assert JsonFileRecordStore(tmp_path / "tracker.json").load_entries()[0].gross == 100
        assert (tmp_path / "audit.jsonl").exists()

    def test_log_level_validated(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValueError):
            AppSettings(log_level="loud")

    def test_env_prefix(self, monkeypatch, tmp_path):
        monkeypatch.setenv("MONEY_TRACKER_DATA_PATH", str(tmp_path / "x.json"))
        monkeypatch.setenv("MONEY_TRACKER_DEFAULT_BUFFER_PERCENT", "150")
        settings = AppSettings()
        assert settings.data_path == tmp_path / "x.json"
        assert settings.default_tracker_settings().buffer_percent == 100
