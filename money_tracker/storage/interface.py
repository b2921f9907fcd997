"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep records in a local JSON file today
2. Use in-memory storage for testing
3. Swap in a synced backend later without touching the engine

The store is a key-value collaborator: four collections, each loaded and
saved whole. Missing data is never an error; it loads as an empty
collection or default settings.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from money_tracker.models.audit import AuditEvent
from money_tracker.models.records import Bill, Entry, TrackerSettings, WeekCheckIn

# Top-level keys, matching the browser app's local storage
ENTRIES_KEY = "bdmt_entries_rebuild_v4"
BILLS_KEY = "bdmt_bills_rebuild_v4"
SETTINGS_KEY = "bdmt_settings_rebuild_v4"
CHECKINS_KEY = "bdmt_checkins_rebuild_v4"

_logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStoreInterface(ABC):
    """
    Abstract interface for record storage.

    Any storage implementation (JSON file, SQLite, etc.)
    must implement these methods.
    """

    @abstractmethod
    def load_entries(self) -> list[Entry]:
        """
        Load every logged night, in insertion order.

        Returns:
            Entries, or an empty list if none were ever saved
        """
        pass

    @abstractmethod
    def save_entries(self, entries: Iterable[Entry]) -> None:
        """
        Replace the stored entries.

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def load_bills(self) -> list[Bill]:
        """Load every bill, in insertion order."""
        pass

    @abstractmethod
    def save_bills(self, bills: Iterable[Bill]) -> None:
        """Replace the stored bills."""
        pass

    @abstractmethod
    def load_settings(self) -> Optional[TrackerSettings]:
        """
        Load the settings record.

        Returns:
            Stored settings, or None if never saved
        """
        pass

    @abstractmethod
    def save_settings(self, settings: TrackerSettings) -> None:
        """Replace the stored settings."""
        pass

    @abstractmethod
    def load_checkins(self) -> dict[str, WeekCheckIn]:
        """Load weekly check-ins keyed by week-start day key."""
        pass

    @abstractmethod
    def save_checkins(self, checkins: dict[str, WeekCheckIn]) -> None:
        """Replace the stored check-ins."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""
    pass


# =============================================================================
# SERIALIZATION HELPERS (shared by implementations)
# =============================================================================

def parse_records(raw: Any, model: type[RecordT]) -> list[RecordT]:
    """
    Parse a stored list of records.

    Non-object items and items that still fail validation are skipped
    and logged; the rest load. A missing collection loads as empty.
    """
    if not isinstance(raw, list):
        if raw is not None:
            _logger.warning("store_collection_not_a_list", model=model.__name__)
        return []

    records = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            _logger.warning("store_record_skipped", model=model.__name__, index=index)
            continue
        try:
            records.append(model.model_validate(item))
        except ValidationError as e:
            _logger.warning(
                "store_record_invalid",
                model=model.__name__,
                index=index,
                error=str(e),
            )
    return records


def parse_settings(raw: Any) -> Optional[TrackerSettings]:
    """Parse stored settings; anything but an object means "never saved"."""
    if not isinstance(raw, dict):
        return None
    return TrackerSettings.model_validate(raw)


def parse_checkins(raw: Any) -> dict[str, WeekCheckIn]:
    """Parse stored check-ins, dropping keys that are not objects."""
    if not isinstance(raw, dict):
        return {}
    return {
        str(key): WeekCheckIn.model_validate(value)
        for key, value in raw.items()
        if isinstance(value, dict)
    }


def dump_records(records: Iterable[BaseModel]) -> list[dict]:
    """Records to JSON-ready dicts using the camelCase storage names."""
    return [record.model_dump(mode="json", by_alias=True) for record in records]


def dump_checkins(checkins: dict[str, WeekCheckIn]) -> dict[str, dict]:
    return {
        key: checkin.model_dump(mode="json", by_alias=True)
        for key, checkin in checkins.items()
    }
