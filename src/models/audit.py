"""
Audit Models for Budget Tracker

Every state change and every rejected input is logged as an audit event.
This provides:
1. Traceability of what happened to the locally stored budget
2. Debugging information when a share link or import file is rejected
3. A record of destructive replaces the user confirmed

DESIGN DECISION: Audit events are write-only. Nothing reads them back
to drive behaviour.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Startup
    BUDGET_LOADED = "budget_loaded"
    STORAGE_LOAD_FAILED = "storage_load_failed"
    STORAGE_SAVE_FAILED = "storage_save_failed"

    # Entry edits
    ENTRY_ADDED = "entry_added"
    ENTRY_UPDATED = "entry_updated"
    ENTRY_DELETED = "entry_deleted"
    ENTRY_TOGGLED = "entry_toggled"

    # Data exchange
    SHARE_LINK_CREATED = "share_link_created"
    SHARE_LINK_DECODED = "share_link_decoded"
    SHARE_LINK_REJECTED = "share_link_rejected"
    BUDGET_EXPORTED = "budget_exported"
    IMPORT_ACCEPTED = "import_accepted"
    IMPORT_REJECTED = "import_rejected"
    BUDGET_MERGED = "budget_merged"
    BUDGET_REPLACED = "budget_replaced"

    # Insights
    INSIGHTS_GENERATED = "insights_generated"
    INSIGHTS_FAILED = "insights_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # What the event is about: an entry id, a year, a file name
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'entry', 'budget', 'share_link')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
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
        Convert to a dictionary suitable for structured logging.
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
        event = AuditEventBuilder.entry_added(entry_id, 2026, 3, "expenses")
        event = AuditEventBuilder.import_rejected("budget.json", reason)
    """

    @staticmethod
    def budget_loaded(year: int, source: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_LOADED,
            entity_type="budget",
            entity_id=str(year),
            description=f"Budget loaded from {source}",
            details={"source": source},
        )

    @staticmethod
    def storage_load_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="storage",
            entity_id=key,
            description="Locally stored budget could not be read",
            error_message=error_message,
        )

    @staticmethod
    def storage_save_failed(key: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="storage",
            entity_id=key,
            description="Budget could not be written to local storage",
            error_message=error_message,
        )

    @staticmethod
    def entry_changed(
        event_type: AuditEventType,
        entry_id: str,
        year: int,
        month: int,
        entry_type: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        verb = event_type.value.split("_", 1)[1]
        return AuditEvent(
            event_type=event_type,
            entity_type="entry",
            entity_id=entry_id,
            description=f"Entry {verb} in {entry_type} of {year}-{month + 1:02d}",
            details={
                "year": year,
                "month": month,
                "entry_type": entry_type,
                **(details or {}),
            },
            is_user_action=True,
        )

    @staticmethod
    def share_link_created(year: int, months: int, length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_CREATED,
            entity_type="share_link",
            entity_id=str(year),
            description=f"Share link created for {months} non-empty month(s)",
            details={"months": months, "token_length": length},
            is_user_action=True,
        )

    @staticmethod
    def share_link_decoded(year: int, version: str, entries: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_DECODED,
            entity_type="share_link",
            entity_id=str(year),
            description=f"Share link ({version}) decoded with {entries} entries",
            details={"version": version, "entries": entries},
        )

    @staticmethod
    def share_link_rejected(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SHARE_LINK_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="share_link",
            description="Share link ignored; falling back to local data",
            error_message=error_message,
        )

    @staticmethod
    def budget_exported(year: int, filename: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_EXPORTED,
            entity_type="budget",
            entity_id=str(year),
            description=f"Budget exported as {filename}",
            details={"filename": filename},
            is_user_action=True,
        )

    @staticmethod
    def import_accepted(
        year: int,
        source: str,
        warnings: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_ACCEPTED,
            entity_type="budget",
            entity_id=str(year),
            correlation_id=correlation_id,
            description=f"Incoming budget from {source} accepted",
            details={"source": source, "warnings": warnings},
            is_user_action=True,
        )

    @staticmethod
    def import_rejected(
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_REJECTED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Incoming budget from {source} rejected",
            details={"source": source},
            error_message=error_message,
            is_user_action=True,
        )

    @staticmethod
    def budget_merged(
        added: int,
        skipped: int,
        years_adopted: list[int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_MERGED,
            entity_type="budget",
            correlation_id=correlation_id,
            description=f"Merged {added} entries ({skipped} duplicates skipped)",
            details={
                "added": added,
                "skipped": skipped,
                "years_adopted": years_adopted,
            },
            is_user_action=True,
        )

    @staticmethod
    def budget_replaced(
        years: list[int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BUDGET_REPLACED,
            severity=AuditSeverity.WARNING,
            entity_type="budget",
            correlation_id=correlation_id,
            description="Local budget replaced by incoming data",
            details={"years": years},
            is_user_action=True,
        )

    @staticmethod
    def insights_generated(model_name: str, length: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_GENERATED,
            entity_type="insights",
            description="Financial tips generated",
            details={"model": model_name, "length": length},
            is_user_action=True,
        )

    @staticmethod
    def insights_failed(error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INSIGHTS_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="insights",
            description="Financial tips unavailable; fallback message shown",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            details=details or {},
            error_message=error_message,
        )
