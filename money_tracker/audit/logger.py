"""
Audit Logger

DESIGN DECISION: Every change to stored records is logged.
This provides:
1. Complete traceability of edits
2. Debugging capability when totals look wrong
3. User can see history of their changes

The audit logger:
- Is synchronous: the tracker already serializes its writes
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from money_tracker.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from money_tracker.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("money_tracker.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_record_added(
        self,
        entity_type: str,
        entity_id: str,
        details: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a new entry or bill."""
        self.log(AuditEventBuilder.record_added(
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
            correlation_id=correlation_id,
        ))

    def log_record_updated(
        self,
        entity_type: str,
        entity_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a field-level edit to an entry or bill."""
        self.log(AuditEventBuilder.record_updated(
            entity_type=entity_type,
            entity_id=entity_id,
            fields=fields,
            correlation_id=correlation_id,
        ))

    def log_record_removed(
        self,
        entity_type: str,
        entity_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log deletion of an entry or bill."""
        self.log(AuditEventBuilder.record_removed(
            entity_type=entity_type,
            entity_id=entity_id,
            correlation_id=correlation_id,
        ))

    def log_settings_updated(
        self,
        requested: dict[str, Any],
        stored: dict[str, Any],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a settings change, flagging any clamped values."""
        self.log(AuditEventBuilder.settings_updated(
            requested=requested,
            stored=stored,
            correlation_id=correlation_id,
        ))

    def log_reflection_saved(
        self,
        week_start: str,
        length: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a saved (or cleared) weekly reflection."""
        self.log(AuditEventBuilder.reflection_saved(
            week_start=week_start,
            length=length,
            correlation_id=correlation_id,
        ))

    def log_records_loaded(self, entries: int, bills: int, checkins: int) -> None:
        self.log(AuditEventBuilder.records_loaded(
            entries=entries,
            bills=bills,
            checkins=checkins,
        ))

    def log_save_failed(
        self,
        collection: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed store write."""
        self.log(AuditEventBuilder.save_failed(
            collection=collection,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user session (e.g., one app run).
    Pass it through all subsequent actions.
    """
    return uuid4()
