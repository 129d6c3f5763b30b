"""
Verification Tracker

Keeps verification status honest across updates:

1. A verifiable property whose value changed loses any trust it had.
   A new value must never inherit the verification of the old one.
2. A changed e-mail address is sent for re-verification and marked as
   in progress until the lookup process reports back.

Both rules compare the new property list with the previously stored
snapshot. When the two agree nothing is changed and nothing is scheduled.
"""

import time
from typing import Callable, Iterable, Optional

from profile_accounts.audit import AuditLogger
from profile_accounts.models.events import VERIFY_USER_DATA_JOB, VerificationJob
from profile_accounts.models.property import (
    AccountProperty,
    PropertyName,
    VerificationStatus,
    is_collection,
)
from profile_accounts.services.jobs import JobSchedulerInterface


# Properties the lookup server can verify
LOOKUP_VERIFIABLE_PROPERTIES = (
    PropertyName.TWITTER.value,
    PropertyName.WEBSITE.value,
    PropertyName.EMAIL.value,
)


def _scalar_index(properties: Iterable[AccountProperty]) -> dict[str, AccountProperty]:
    return {prop.name: prop for prop in properties if not is_collection(prop.name)}


class VerificationTracker:
    """Applies verification rules to a new property list."""

    def __init__(
        self,
        job_scheduler: JobSchedulerInterface,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._jobs = job_scheduler
        self._audit_logger = audit_logger
        self._clock = clock

    def update_verification_status(
        self,
        properties: Iterable[AccountProperty],
        old_properties: Iterable[AccountProperty],
    ) -> None:
        """Reset the status of changed verifiable properties, in place."""
        new = _scalar_index(properties)
        old = _scalar_index(old_properties)

        for name in LOOKUP_VERIFIABLE_PROPERTIES:
            prop = new.get(name)
            if prop is None:
                continue
            previous = old.get(name)
            was_verified = (
                previous is not None
                and previous.verified == VerificationStatus.VERIFIED
            )
            value_changed = previous is None or previous.value != prop.value
            if value_changed and (
                prop.verified != VerificationStatus.NOT_VERIFIED or was_verified
            ):
                prop.verified = VerificationStatus.NOT_VERIFIED

    def check_email_verification(
        self,
        owner: str,
        properties: Iterable[AccountProperty],
        old_properties: Iterable[AccountProperty],
    ) -> Optional[VerificationJob]:
        """
        Schedule re-verification if the e-mail address changed.

        Returns the scheduled job, or None when nothing was scheduled.
        """
        prop = _scalar_index(properties).get(PropertyName.EMAIL.value)
        if prop is None:
            return None
        previous = _scalar_index(old_properties).get(PropertyName.EMAIL.value)
        old_mail = previous.value if previous is not None else ""
        if old_mail == prop.value:
            return None

        job = VerificationJob(
            attribute=PropertyName.EMAIL.value,
            value=prop.value,
            owner=owner,
            attempt=0,
            scheduled_at=int(self._clock()),
        )
        self._jobs.enqueue(VERIFY_USER_DATA_JOB, job.model_dump(by_alias=True))
        prop.verified = VerificationStatus.VERIFICATION_IN_PROGRESS

        if self._audit_logger:
            self._audit_logger.log_verification_scheduled(job)
        return job

    def apply(
        self,
        owner: str,
        properties: list[AccountProperty],
        old_properties: list[AccountProperty],
    ) -> Optional[VerificationJob]:
        """Run both rules; the e-mail rule wins for the e-mail property."""
        self.update_verification_status(properties, old_properties)
        return self.check_email_verification(owner, properties, old_properties)
