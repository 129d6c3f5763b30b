"""Verification tracking package."""

from profile_accounts.verification.tracker import (
    LOOKUP_VERIFIABLE_PROPERTIES,
    VerificationTracker,
)

__all__ = ["LOOKUP_VERIFIABLE_PROPERTIES", "VerificationTracker"]
