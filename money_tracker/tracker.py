"""
Tracker Service for Dancer Money Tracker

This module ties together the store, the audit trail and the engine, and
defines the user actions:
1. Nightly entries (add / update / remove)
2. Bills (add / update / mark paid / remove)
3. Settings (update, always clamped)
4. Sunday check-in (save / clear the week's reflection)
5. Dashboard (recompute every derived view)

DESIGN DECISION: The tracker owns ONE immutable snapshot. Each action
builds the next snapshot, persists it, and only then swaps it in. A failed
write leaves both the store and the snapshot as they were, and the engine
never sees a half-applied change.
"""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar
from uuid import UUID

import structlog
from pydantic import BaseModel

from money_tracker.audit import AuditLogger, create_correlation_id
from money_tracker.config import AppSettings, get_settings
from money_tracker.engine.calendar import DayKey, today_key, week_start
from money_tracker.engine.dashboard import build_dashboard
from money_tracker.models.records import (
    Bill,
    Entry,
    TrackerSettings,
    TrackerSnapshot,
    WeekCheckIn,
)
from money_tracker.models.views import Dashboard
from money_tracker.storage import (
    JsonFileRecordStore,
    JsonLinesAuditStorage,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)

RecordT = TypeVar("RecordT", bound=BaseModel)


def _field_names(model: type[BaseModel]) -> dict[str, str]:
    """Map both storage aliases and field names to field names."""
    names = {}
    for name, field in model.model_fields.items():
        names[name] = name
        if field.alias:
            names[field.alias] = name
    return names


def apply_patch(record: RecordT, changes: Mapping[str, Any]) -> RecordT:
    """
    Return a new, re-validated record with ``changes`` applied.

    Accepts snake_case or camelCase field names. The ``id`` never changes.
    A mapping given for ``flags`` is merged into the current flags.

    Raises:
        ValueError: If a change names a field the record does not have
    """
    model = type(record)
    names = _field_names(model)
    unknown = sorted(key for key in changes if key not in names)
    if unknown:
        raise ValueError(f"Unknown {model.__name__} field(s): {', '.join(unknown)}")

    data = record.model_dump()
    for key, value in changes.items():
        name = names[key]
        if name == "id":
            continue
        if name == "flags" and isinstance(value, Mapping):
            value = {**data["flags"], **value}
        data[name] = value
    return model.model_validate(data)


class MoneyTracker:
    """
    Applies user actions to stored records and recomputes the dashboard.

    Usage:
        tracker = MoneyTracker(JsonFileRecordStore("data/tracker.json"))
        entry = tracker.add_entry(gross=500, tipout=80)
        dashboard = tracker.dashboard()
    """

    def __init__(
        self,
        store: RecordStoreInterface,
        audit_logger: Optional[AuditLogger] = None,
        default_settings: Optional[TrackerSettings] = None,
        correlation_id: Optional[UUID] = None,
        clock: Callable[[], DayKey] = today_key,
    ):
        """
        Load the current records from ``store``.

        Args:
            store: Record store. Missing data loads as empty collections.
            audit_logger: Audit trail. If None, events are only logged locally.
            default_settings: Settings used when the store has none.
            correlation_id: Ties every event of this tracker together.
            clock: Source of "today" for new records and the dashboard.
        """
        self._store = store
        self._audit = audit_logger or AuditLogger()
        self._correlation_id = correlation_id or create_correlation_id()
        self._clock = clock
        self._logger = structlog.get_logger(__name__)
        self._snapshot = self._load(default_settings or TrackerSettings())

    def _load(self, default_settings: TrackerSettings) -> TrackerSnapshot:
        entries = self._store.load_entries()
        bills = self._store.load_bills()
        settings = self._store.load_settings() or default_settings
        checkins = self._store.load_checkins()

        self._audit.log_records_loaded(
            entries=len(entries),
            bills=len(bills),
            checkins=len(checkins),
        )
        return TrackerSnapshot(
            entries=tuple(entries),
            bills=tuple(bills),
            settings=settings,
            checkins=checkins,
        )

    @property
    def snapshot(self) -> TrackerSnapshot:
        """The current immutable snapshot."""
        return self._snapshot

    @property
    def settings(self) -> TrackerSettings:
        return self._snapshot.settings

    def _commit(self, collection: str, save: Callable[[], None], **update: Any) -> None:
        """Persist first, then swap the snapshot."""
        try:
            save()
        except StorageError as e:
            self._audit.log_save_failed(
                collection=collection,
                error_message=str(e),
                correlation_id=self._correlation_id,
            )
            raise
        self._snapshot = self._snapshot.model_copy(update=update)

    @staticmethod
    def _find(records: tuple[RecordT, ...], record_id: str, kind: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise NotFoundError(f"{kind.capitalize()} not found: {record_id}")

    # =========================================================================
    # ENTRIES
    # =========================================================================

    def add_entry(self, date: Optional[DayKey] = None, **fields: Any) -> Entry:
        """
        Log a new night. Defaults to today with zero amounts and no flags.
        """
        entry = Entry.model_validate({**fields, "date": date or self._clock()})
        entries = self._snapshot.entries + (entry,)
        self._commit("entries", lambda: self._store.save_entries(entries), entries=entries)

        self._audit.log_record_added(
            entity_type="entry",
            entity_id=entry.id,
            details={"date": entry.date},
            correlation_id=self._correlation_id,
        )
        return entry

    def update_entry(self, entry_id: str, **changes: Any) -> Entry:
        """
        Change fields of a logged night.

        Raises:
            NotFoundError: If no entry has ``entry_id``
            ValueError: If a change names an unknown field
        """
        entries = list(self._snapshot.entries)
        index = self._find(self._snapshot.entries, entry_id, "entry")
        updated = apply_patch(entries[index], changes)
        entries[index] = updated
        new_entries = tuple(entries)
        self._commit("entries", lambda: self._store.save_entries(new_entries), entries=new_entries)

        self._audit.log_record_updated(
            entity_type="entry",
            entity_id=entry_id,
            fields=sorted(changes),
            correlation_id=self._correlation_id,
        )
        return updated

    def remove_entry(self, entry_id: str) -> None:
        """
        Delete a logged night.

        Raises:
            NotFoundError: If no entry has ``entry_id``
        """
        self._find(self._snapshot.entries, entry_id, "entry")
        entries = tuple(e for e in self._snapshot.entries if e.id != entry_id)
        self._commit("entries", lambda: self._store.save_entries(entries), entries=entries)

        self._audit.log_record_removed(
            entity_type="entry",
            entity_id=entry_id,
            correlation_id=self._correlation_id,
        )

    # =========================================================================
    # BILLS
    # =========================================================================

    def add_bill(self, due_date: Optional[DayKey] = None, **fields: Any) -> Bill:
        """Add a bill. Defaults to due today, unpaid, zero amount."""
        bill = Bill.model_validate({**fields, "due_date": due_date or self._clock()})
        bills = self._snapshot.bills + (bill,)
        self._commit("bills", lambda: self._store.save_bills(bills), bills=bills)

        self._audit.log_record_added(
            entity_type="bill",
            entity_id=bill.id,
            details={"name": bill.name, "amount": str(bill.amount), "due_date": bill.due_date},
            correlation_id=self._correlation_id,
        )
        return bill

    def update_bill(self, bill_id: str, **changes: Any) -> Bill:
        """
        Change fields of a bill.

        Raises:
            NotFoundError: If no bill has ``bill_id``
            ValueError: If a change names an unknown field
        """
        bills = list(self._snapshot.bills)
        index = self._find(self._snapshot.bills, bill_id, "bill")
        updated = apply_patch(bills[index], changes)
        bills[index] = updated
        new_bills = tuple(bills)
        self._commit("bills", lambda: self._store.save_bills(new_bills), bills=new_bills)

        self._audit.log_record_updated(
            entity_type="bill",
            entity_id=bill_id,
            fields=sorted(changes),
            correlation_id=self._correlation_id,
        )
        return updated

    def mark_bill_paid(self, bill_id: str, paid: bool = True) -> Bill:
        """Toggle a bill's paid status."""
        return self.update_bill(bill_id, paid=paid)

    def remove_bill(self, bill_id: str) -> None:
        """
        Delete a bill.

        Raises:
            NotFoundError: If no bill has ``bill_id``
        """
        self._find(self._snapshot.bills, bill_id, "bill")
        bills = tuple(b for b in self._snapshot.bills if b.id != bill_id)
        self._commit("bills", lambda: self._store.save_bills(bills), bills=bills)

        self._audit.log_record_removed(
            entity_type="bill",
            entity_id=bill_id,
            correlation_id=self._correlation_id,
        )

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def update_settings(self, **changes: Any) -> TrackerSettings:
        """
        Change settings. Out-of-range values are clamped, not rejected:
        a buffer of 150% is stored as 100%.

        Raises:
            ValueError: If a change names an unknown setting
        """
        settings = apply_patch(self._snapshot.settings, changes)
        self._commit("settings", lambda: self._store.save_settings(settings), settings=settings)

        names = _field_names(TrackerSettings)
        requested = {names[key]: value for key, value in changes.items()}
        stored = settings.model_dump()
        self._audit.log_settings_updated(
            requested=requested,
            stored={key: stored[key] for key in requested},
            correlation_id=self._correlation_id,
        )
        return settings

    # =========================================================================
    # SUNDAY CHECK-IN
    # =========================================================================

    def current_week_start(self) -> DayKey:
        return week_start(self._clock())

    def checkin_for_week(self, week_start_key: Optional[DayKey] = None) -> WeekCheckIn:
        """The stored check-in for a week, or an empty one."""
        key = week_start_key or self.current_week_start()
        return self._snapshot.checkins.get(key) or WeekCheckIn()

    def save_reflection(
        self,
        reflection: str,
        week_start_key: Optional[DayKey] = None,
    ) -> WeekCheckIn:
        """Write (or overwrite) the reflection for a week."""
        key = week_start_key or self.current_week_start()
        checkin = WeekCheckIn(reflection=reflection, updated_at=datetime.now(timezone.utc))
        checkins = {**self._snapshot.checkins, key: checkin}
        self._commit("checkins", lambda: self._store.save_checkins(checkins), checkins=checkins)

        self._audit.log_reflection_saved(
            week_start=key,
            length=len(checkin.reflection),
            correlation_id=self._correlation_id,
        )
        return checkin

    def clear_reflection(self, week_start_key: Optional[DayKey] = None) -> WeekCheckIn:
        """Write an empty reflection. The record stays."""
        return self.save_reflection("", week_start_key)

    # =========================================================================
    # DASHBOARD
    # =========================================================================

    def dashboard(
        self,
        today: Optional[DayKey] = None,
        planned_nights: Optional[int] = None,
    ) -> Dashboard:
        """Recompute every derived view from the current snapshot."""
        result = build_dashboard(self._snapshot, today or self._clock(), planned_nights)
        self._logger.debug(
            "dashboard_built",
            today=result.today,
            entries=len(self._snapshot.entries),
            bills=len(self._snapshot.bills),
            weekly_target=str(result.weekly_target.total),
        )
        return result


def create_tracker(settings: Optional[AppSettings] = None) -> MoneyTracker:
    """
    Factory function to create a tracker from application settings.

    Args:
        settings: Application settings. Defaults to the cached env settings.

    Returns:
        A tracker over the configured JSON file store

    Raises:
        StorageError: If the data file exists but cannot be read
    """
    settings = settings or get_settings()
    logging.basicConfig(level=settings.log_level, format="%(message)s")

    audit_storage = (
        JsonLinesAuditStorage(settings.audit_log_path)
        if settings.audit_log_path
        else None
    )
    return MoneyTracker(
        store=JsonFileRecordStore(settings.data_path),
        audit_logger=AuditLogger(audit_storage),
        default_settings=settings.default_tracker_settings(),
    )
