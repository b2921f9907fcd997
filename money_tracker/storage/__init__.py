"""
Storage Package

Provides abstract interfaces and concrete implementations for record storage.
Currently implements a local JSON file as the backend, but designed to be swappable.
"""

from money_tracker.storage.interface import (
    BILLS_KEY,
    CHECKINS_KEY,
    ENTRIES_KEY,
    SETTINGS_KEY,
    AuditStorageInterface,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from money_tracker.storage.json_file import (
    JsonFileRecordStore,
    JsonLinesAuditStorage,
)
from money_tracker.storage.memory import (
    InMemoryAuditStorage,
    InMemoryRecordStore,
)

__all__ = [
    # Keys
    "BILLS_KEY",
    "CHECKINS_KEY",
    "ENTRIES_KEY",
    "SETTINGS_KEY",
    # Interfaces
    "AuditStorageInterface",
    "RecordStoreInterface",
    # Exceptions
    "NotFoundError",
    "StorageError",
    # JSON file implementation
    "JsonFileRecordStore",
    "JsonLinesAuditStorage",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryRecordStore",
]
