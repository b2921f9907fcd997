"""
JSON File Storage Implementation

DESIGN DECISION: A single local JSON document is the storage backend because:
1. The data is personal and small (a few hundred nights a year)
2. No database setup required
3. The document is human-readable and easy to back up
4. Its top-level keys match the browser app's local storage, so an
   exported local-storage dump loads as-is

TRADEOFFS:
- Every save rewrites the whole document (fine at this size)
- No concurrent writers (the tracker serializes its own writes)

Audit events go to a separate append-only JSON-lines file.
"""

import json
import os
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from money_tracker.models.audit import AuditEvent
from money_tracker.models.records import Bill, Entry, TrackerSettings, WeekCheckIn
from money_tracker.storage.interface import (
    BILLS_KEY,
    CHECKINS_KEY,
    ENTRIES_KEY,
    SETTINGS_KEY,
    AuditStorageInterface,
    RecordStoreInterface,
    StorageError,
    dump_checkins,
    dump_records,
    parse_checkins,
    parse_records,
    parse_settings,
)


class JsonFileRecordStore(RecordStoreInterface):
    """
    Record store backed by one JSON object on disk.

    A missing or empty file is an empty store. A file that is not a JSON
    object raises StorageError rather than being silently overwritten.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_document(self) -> dict:
        if not self._path.exists():
            return {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read store file {self._path}: {e}")

        if not text.strip():
            return {}
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"Store file {self._path} is not valid JSON: {e}")
        if not isinstance(document, dict):
            raise StorageError(f"Store file {self._path} must contain a JSON object")
        return document

    def _get(self, key: str) -> Any:
        value = self._read_document().get(key)
        # Browser local storage holds each collection as a JSON string
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                return None
        return value

    def _put(self, key: str, value: Any) -> None:
        document = self._read_document()
        document[key] = value
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(document, indent=2, ensure_ascii=False),
                encoding="utf-8",
            )
            os.replace(tmp_path, self._path)
        except OSError as e:
            raise StorageError(f"Failed to write store file {self._path}: {e}")

    def load_entries(self) -> list[Entry]:
        return parse_records(self._get(ENTRIES_KEY), Entry)

    def save_entries(self, entries: Iterable[Entry]) -> None:
        self._put(ENTRIES_KEY, dump_records(entries))

    def load_bills(self) -> list[Bill]:
        return parse_records(self._get(BILLS_KEY), Bill)

    def save_bills(self, bills: Iterable[Bill]) -> None:
        self._put(BILLS_KEY, dump_records(bills))

    def load_settings(self) -> Optional[TrackerSettings]:
        return parse_settings(self._get(SETTINGS_KEY))

    def save_settings(self, settings: TrackerSettings) -> None:
        self._put(SETTINGS_KEY, settings.model_dump(mode="json", by_alias=True))

    def load_checkins(self) -> dict[str, WeekCheckIn]:
        return parse_checkins(self._get(CHECKINS_KEY))

    def save_checkins(self, checkins: dict[str, WeekCheckIn]) -> None:
        self._put(CHECKINS_KEY, dump_checkins(checkins))


class JsonLinesAuditStorage(AuditStorageInterface):
    """
    Append-only audit log, one JSON object per line.

    Lines that fail to parse are skipped when reading back.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    def append_event(self, event: AuditEvent) -> bool:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as handle:
                handle.write(json.dumps(event.to_log_dict(), ensure_ascii=False) + "\n")
            return True
        except OSError as e:
            raise StorageError(f"Failed to append audit event: {e}")

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        if not self._path.exists():
            return []
        try:
            lines = self._path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read audit log: {e}")

        events = []
        for line in reversed(lines):
            if len(events) >= limit:
                break
            if not line.strip():
                continue
            try:
                events.append(AuditEvent.model_validate(json.loads(line)))
            except (json.JSONDecodeError, ValueError):
                continue
        return events
