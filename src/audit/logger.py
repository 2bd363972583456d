"""
Audit Logger

DESIGN DECISION: Every state change and every rejected input is logged.
This provides:
1. Traceability of changes to the local budget
2. Debugging capability for rejected share links and imports
3. A short activity history the UI can show

The audit logger:
- Is synchronous: every mutation runs to completion before the next one
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

from collections import deque
from typing import Optional
from uuid import UUID, uuid4

import structlog

from src.models.audit import AuditEvent, AuditEventBuilder, AuditEventType


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
    2. A bounded in-memory history (for the activity panel)
    """

    def __init__(self, history_size: int = 50):
        """
        Initialize audit logger.

        Args:
            history_size: Number of recent events kept in memory.
        """
        self._history: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("budget_tracker.audit")

    @property
    def history(self) -> list[AuditEvent]:
        """Recent events, newest first."""
        return list(reversed(self._history))

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Returns False if the local log write failed. Never raises.
        """
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity.value == "error":
                self._logger.error("audit_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception:
            return False

        return True

    def log_budget_loaded(self, year: int, source: str) -> None:
        self.log(AuditEventBuilder.budget_loaded(year=year, source=source))

    def log_storage_load_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_load_failed(key=key, error_message=error_message))

    def log_storage_save_failed(self, key: str, error_message: str) -> None:
        self.log(AuditEventBuilder.storage_save_failed(key=key, error_message=error_message))

    def log_entry_changed(
        self,
        event_type: AuditEventType,
        entry_id: str,
        year: int,
        month: int,
        entry_type: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an add, update, delete or paid toggle of an entry."""
        event = AuditEventBuilder.entry_changed(
            event_type=event_type,
            entry_id=entry_id,
            year=year,
            month=month,
            entry_type=entry_type,
            details=details,
        )
        self.log(event)

    def log_share_link_created(self, year: int, months: int, length: int) -> None:
        self.log(AuditEventBuilder.share_link_created(year=year, months=months, length=length))

    def log_share_link_decoded(self, year: int, version: str, entries: int) -> None:
        self.log(AuditEventBuilder.share_link_decoded(year=year, version=version, entries=entries))

    def log_share_link_rejected(self, error_message: str) -> None:
        self.log(AuditEventBuilder.share_link_rejected(error_message=error_message))

    def log_budget_exported(self, year: int, filename: str) -> None:
        self.log(AuditEventBuilder.budget_exported(year=year, filename=filename))

    def log_import_accepted(
        self,
        year: int,
        source: str,
        warnings: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.import_accepted(
            year=year,
            source=source,
            warnings=warnings,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_import_rejected(
        self,
        source: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.import_rejected(
            source=source,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_budget_merged(
        self,
        added: int,
        skipped: int,
        years_adopted: list[int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.budget_merged(
            added=added,
            skipped=skipped,
            years_adopted=years_adopted,
            correlation_id=correlation_id,
        )
        self.log(event)

    def log_budget_replaced(
        self,
        years: list[int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.budget_replaced(years=years, correlation_id=correlation_id))

    def log_insights_generated(self, model_name: str, length: int) -> None:
        self.log(AuditEventBuilder.insights_generated(model_name=model_name, length=length))

    def log_insights_failed(self, error_message: str) -> None:
        self.log(AuditEventBuilder.insights_failed(error_message=error_message))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
        )
        self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a multi-step user action (e.g., an import).
    """
    return uuid4()
