"""
In-Memory Storage

Same contract as the JSON file store, kept in a dict. Used by tests and
by the app when no data path is writable. Values are stored in their
serialized form so loading goes through the same normalization path.
"""

from typing import Any, Iterable, Optional

from money_tracker.models.audit import AuditEvent
from money_tracker.models.records import Bill, Entry, TrackerSettings, WeekCheckIn
from money_tracker.storage.interface import (
    BILLS_KEY,
    CHECKINS_KEY,
    ENTRIES_KEY,
    SETTINGS_KEY,
    AuditStorageInterface,
    RecordStoreInterface,
    dump_checkins,
    dump_records,
    parse_checkins,
    parse_records,
    parse_settings,
)


class InMemoryRecordStore(RecordStoreInterface):
    """Record store over a plain dict keyed like the JSON document."""

    def __init__(self, initial: Optional[dict[str, Any]] = None):
        self.data: dict[str, Any] = dict(initial or {})

    def load_entries(self) -> list[Entry]:
        return parse_records(self.data.get(ENTRIES_KEY), Entry)

    def save_entries(self, entries: Iterable[Entry]) -> None:
        self.data[ENTRIES_KEY] = dump_records(entries)

    def load_bills(self) -> list[Bill]:
        return parse_records(self.data.get(BILLS_KEY), Bill)

    def save_bills(self, bills: Iterable[Bill]) -> None:
        self.data[BILLS_KEY] = dump_records(bills)

    def load_settings(self) -> Optional[TrackerSettings]:
        return parse_settings(self.data.get(SETTINGS_KEY))

    def save_settings(self, settings: TrackerSettings) -> None:
        self.data[SETTINGS_KEY] = settings.model_dump(mode="json", by_alias=True)

    def load_checkins(self) -> dict[str, WeekCheckIn]:
        return parse_checkins(self.data.get(CHECKINS_KEY))

    def save_checkins(self, checkins: dict[str, WeekCheckIn]) -> None:
        self.data[CHECKINS_KEY] = dump_checkins(checkins)


class InMemoryAuditStorage(AuditStorageInterface):
    """Audit events kept in a list, oldest first."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self.events))[:limit]
