"""
Audit Models for Dancer Money Tracker

Every user action that changes stored data is logged for audit purposes.
This provides:
1. Traceability of every edit to entries, bills and settings
2. Debugging information when stored data looks wrong
3. Ability to reconstruct history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Every tracker action has its own event type.
    """
    # Nightly entries
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_REMOVED = "entry_removed"

    # Bills
    BILL_ADDED = "bill_added"
    BILL_UPDATED = "bill_updated"
    BILL_REMOVED = "bill_removed"

    # Settings
    SETTINGS_UPDATED = "settings_updated"

    # Sunday check-in
    REFLECTION_SAVED = "reflection_saved"
    REFLECTION_CLEARED = "reflection_cleared"

    # Persistence
    RECORDS_LOADED = "records_loaded"
    SAVE_FAILED = "save_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every stored-data change creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what record is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of record (e.g., 'entry', 'bill', 'settings', 'checkin')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID or key of the record this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one editing session)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging
        and for one line of the JSON-lines audit file.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("entry", entry.id, {"date": entry.date})
        event = AuditEventBuilder.settings_updated(requested, stored)
    """

    @staticmethod
    def record_added(
        entity_type: str,
        entity_id: str,
        details: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ENTRY_ADDED
            if entity_type == "entry"
            else AuditEventType.BILL_ADDED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} added",
            details=details,
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ENTRY_UPDATED
            if entity_type == "entry"
            else AuditEventType.BILL_UPDATED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def record_removed(
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        event_type = (
            AuditEventType.ENTRY_REMOVED
            if entity_type == "entry"
            else AuditEventType.BILL_REMOVED
        )
        return AuditEvent(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
            description=f"{entity_type.capitalize()} removed",
            is_user_action=True,
        )

    @staticmethod
    def settings_updated(
        requested: dict[str, Any],
        stored: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        # A value that came back different from what was asked for was clamped
        clamped = sorted(
            key for key, value in requested.items()
            if key in stored and str(stored[key]) != str(value)
        )
        return AuditEvent(
            event_type=AuditEventType.SETTINGS_UPDATED,
            severity=AuditSeverity.WARNING if clamped else AuditSeverity.INFO,
            entity_type="settings",
            correlation_id=correlation_id,
            description="Settings updated" + (f" (clamped: {', '.join(clamped)})" if clamped else ""),
            details={
                "requested": {k: str(v) for k, v in requested.items()},
                "stored": {k: str(v) for k, v in stored.items()},
                "clamped": clamped,
            },
            is_user_action=True,
        )

    @staticmethod
    def reflection_saved(
        week_start: str,
        length: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        cleared = length == 0
        return AuditEvent(
            event_type=(
                AuditEventType.REFLECTION_CLEARED
                if cleared
                else AuditEventType.REFLECTION_SAVED
            ),
            entity_type="checkin",
            entity_id=week_start,
            correlation_id=correlation_id,
            description=(
                f"Reflection cleared for week of {week_start}"
                if cleared
                else f"Reflection saved for week of {week_start}"
            ),
            details={"length": length},
            is_user_action=True,
        )

    @staticmethod
    def records_loaded(
        entries: int,
        bills: int,
        checkins: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORDS_LOADED,
            severity=AuditSeverity.DEBUG,
            description=f"Loaded {entries} entries, {bills} bills, {checkins} check-ins",
            details={
                "entries": entries,
                "bills": bills,
                "checkins": checkins,
            },
        )

    @staticmethod
    def save_failed(
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type=collection,
            correlation_id=correlation_id,
            description=f"Failed to save {collection}",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
