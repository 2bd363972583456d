"""Audit trail of budget changes, exchanges and rejected inputs."""

from src.audit.logger import AuditLogger, create_correlation_id

__all__ = ["AuditLogger", "create_correlation_id"]
