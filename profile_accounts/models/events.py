"""
Event Models for Profile Accounts

Every change to a stored account produces an AccountEvent. Events are:
1. Written to the structured log by the AuditLogger
2. Published on the event bus for subscribers (search, federation, ...)

The verification job payload handed to the job scheduler lives here too,
so every message leaving the core has one schema.
"""

import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from profile_accounts.models.property import AccountProperty


VERIFY_USER_DATA_JOB = "verify_user_data"


class AccountEventType(str, Enum):
    """Types of events the account store emits."""
    ACCOUNT_CREATED = "account_created"
    ACCOUNT_UPDATED = "account_updated"
    ACCOUNT_DELETED = "account_deleted"
    VERIFICATION_SCHEDULED = "verification_scheduled"
    MALFORMED_RECORD = "malformed_record"


class AccountEventSeverity(str, Enum):
    """Severity level for account events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AccountEvent(BaseModel):
    """A single account event."""

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )
    event_type: AccountEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AccountEventSeverity = Field(
        default=AccountEventSeverity.INFO,
        description="Event severity"
    )
    owner: str = Field(
        ...,
        description="uid of the account owner"
    )
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data, written to the log"
    )
    published_details: dict[str, Any] = Field(
        default_factory=dict,
        description="Data for event bus subscribers only, never logged"
    )
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "owner": self.owner,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_payload(self) -> dict:
        """Payload published on the event bus."""
        return {"owner": self.owner, **self.published_details}


class VerificationJob(BaseModel):
    """Payload of a re-verification request for the lookup process."""

    attribute: str
    value: str
    owner: str
    attempt: int = Field(default=0, ge=0)
    scheduled_at: int = Field(
        default_factory=lambda: int(time.time()),
        serialization_alias="scheduledAt",
        description="Unix time the request was scheduled"
    )


def _property_summary(properties: list[AccountProperty]) -> dict[str, Any]:
    # Property values can be private; only names go to the log
    return {
        "properties": sorted({prop.name for prop in properties}),
        "count": len(properties),
    }


class AccountEventBuilder:
    """
    Helper class to build account events with common patterns.

    Usage:
        event = AccountEventBuilder.account_updated(owner, properties)
    """

    @staticmethod
    def account_created(owner: str, properties: list[AccountProperty]) -> AccountEvent:
        return AccountEvent(
            event_type=AccountEventType.ACCOUNT_CREATED,
            owner=owner,
            description="Default account record created",
            details=_property_summary(properties),
            published_details={"data": [prop.to_dict() for prop in properties]},
        )

    @staticmethod
    def account_updated(owner: str, properties: list[AccountProperty]) -> AccountEvent:
        return AccountEvent(
            event_type=AccountEventType.ACCOUNT_UPDATED,
            owner=owner,
            description=f"Account updated with {len(properties)} properties",
            details=_property_summary(properties),
            published_details={"data": [prop.to_dict() for prop in properties]},
        )

    @staticmethod
    def account_deleted(owner: str) -> AccountEvent:
        return AccountEvent(
            event_type=AccountEventType.ACCOUNT_DELETED,
            owner=owner,
            description="Account record and index rows deleted",
        )

    @staticmethod
    def verification_scheduled(job: VerificationJob) -> AccountEvent:
        return AccountEvent(
            event_type=AccountEventType.VERIFICATION_SCHEDULED,
            owner=job.owner,
            description=f"Verification of {job.attribute} scheduled",
            details={
                "attribute": job.attribute,
                "attempt": job.attempt,
            },
        )

    @staticmethod
    def malformed_record(owner: str, error_message: str) -> AccountEvent:
        return AccountEvent(
            event_type=AccountEventType.MALFORMED_RECORD,
            severity=AccountEventSeverity.CRITICAL,
            owner=owner,
            description=(
                f"User data of {owner} contained invalid JSON, "
                "hence falling back to a default user record"
            ),
            error_message=error_message,
        )
