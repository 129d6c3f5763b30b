"""Audit logging package."""

from profile_accounts.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
