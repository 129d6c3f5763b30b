"""
Audit Logger

DESIGN DECISION: Every change to a stored account is logged.
This provides:
1. Traceability of who changed which profile when
2. A record of every verification request sent out
3. Loud diagnostics when a stored record cannot be read

The audit logger only writes to the structured local log. Events for
other components go through the event bus, not through this logger.
"""

import logging
from typing import Optional

import structlog

from profile_accounts.config import get_settings
from profile_accounts.models.events import (
    AccountEvent,
    AccountEventBuilder,
    AccountEventSeverity,
    VerificationJob,
)
from profile_accounts.models.property import AccountProperty


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


def configure_logging(level: Optional[str] = None) -> None:
    """
    Route the structured log to stderr at the given level.

    For application entry points; the library itself never touches the
    root logger. Defaults to the configured ACCOUNTS_LOG_LEVEL.
    """
    level = (level or get_settings().accounts.log_level).upper()
    logging.basicConfig(format="%(message)s", level=getattr(logging, level))


class AuditLogger:
    """Central audit logging service for account changes."""

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("profile_accounts")

    def log(self, event: AccountEvent) -> None:
        """Log an account event at its severity."""
        log_dict = event.to_log_dict()

        if event.severity == AccountEventSeverity.CRITICAL:
            self._logger.critical("account_event", **log_dict)
        elif event.severity == AccountEventSeverity.ERROR:
            self._logger.error("account_event", **log_dict)
        elif event.severity == AccountEventSeverity.WARNING:
            self._logger.warning("account_event", **log_dict)
        elif event.severity == AccountEventSeverity.DEBUG:
            self._logger.debug("account_event", **log_dict)
        else:
            self._logger.info("account_event", **log_dict)

    def log_account_created(
        self,
        owner: str,
        properties: list[AccountProperty],
    ) -> None:
        self.log(AccountEventBuilder.account_created(owner, properties))

    def log_account_updated(
        self,
        owner: str,
        properties: list[AccountProperty],
    ) -> None:
        self.log(AccountEventBuilder.account_updated(owner, properties))

    def log_account_deleted(self, owner: str) -> None:
        self.log(AccountEventBuilder.account_deleted(owner))

    def log_verification_scheduled(self, job: VerificationJob) -> None:
        self.log(AccountEventBuilder.verification_scheduled(job))

    def log_malformed_record(self, owner: str, error_message: str) -> None:
        """Stored data could not be decoded; the caller falls back to defaults."""
        self.log(AccountEventBuilder.malformed_record(owner, error_message))
