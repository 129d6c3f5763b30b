"""
Data Models Package

This package contains the property, account and event models used by
the account store. All data flowing through the system conforms to them.
"""

from profile_accounts.models.property import (
    COLLECTION_PROPERTIES,
    SCALAR_PROPERTIES,
    AccountProperty,
    CollectionName,
    LegacyScope,
    PropertyCollection,
    PropertyName,
    Scope,
    VerificationStatus,
    is_collection,
    map_scope_to_v2,
    parse_verification_status,
)
from profile_accounts.models.account import (
    Account,
    AccountUser,
    PropertyNotFoundError,
)
from profile_accounts.models.events import (
    VERIFY_USER_DATA_JOB,
    AccountEvent,
    AccountEventBuilder,
    AccountEventSeverity,
    AccountEventType,
    VerificationJob,
)

__all__ = [
    # Property models
    "COLLECTION_PROPERTIES",
    "SCALAR_PROPERTIES",
    "AccountProperty",
    "CollectionName",
    "LegacyScope",
    "PropertyCollection",
    "PropertyName",
    "Scope",
    "VerificationStatus",
    "is_collection",
    "map_scope_to_v2",
    "parse_verification_status",
    # Account models
    "Account",
    "AccountUser",
    "PropertyNotFoundError",
    # Event models
    "VERIFY_USER_DATA_JOB",
    "AccountEvent",
    "AccountEventBuilder",
    "AccountEventSeverity",
    "AccountEventType",
    "VerificationJob",
]
