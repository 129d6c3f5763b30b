"""
Core Property Models for Profile Accounts

A profile is a set of typed properties. Each property carries:
1. A value (free text, normalized per attribute by the validators)
2. A privacy scope
3. A verification status issued by an external lookup process

DESIGN DECISION: Attribute shape (single value vs. many values) is a
static classification of the attribute name, consulted through
is_collection(). There is no subclass per attribute.
"""

from enum import Enum
from typing import Iterator, Optional

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class PropertyName(str, Enum):
    """Scalar attributes: at most one property per account."""
    DISPLAYNAME = "displayname"
    ADDRESS = "address"
    WEBSITE = "website"
    EMAIL = "email"
    AVATAR = "avatar"
    PHONE = "phone"
    TWITTER = "twitter"


class CollectionName(str, Enum):
    """Collection attributes: any number of properties per account."""
    ADDITIONAL_EMAIL = "additional_mail"


class Scope(str, Enum):
    """
    Visibility of a property value.

    The "v2-" prefix keeps these distinguishable from LegacyScope values,
    which share some of the same words.
    """
    PRIVATE = "v2-private"      # Only the owner
    LOCAL = "v2-local"          # Users of this instance
    FEDERATED = "v2-federated"  # Trusted servers
    PUBLISHED = "v2-published"  # Public lookup directory


class LegacyScope(str, Enum):
    """Scope encoding used by records written before Scope existed."""
    PRIVATE = "private"
    CONTACTS_ONLY = "contacts"
    PUBLIC = "public"


class VerificationStatus(str, Enum):
    """Trust state of a property as attested by the lookup process."""
    NOT_VERIFIED = "0"
    VERIFICATION_IN_PROGRESS = "1"
    VERIFIED = "2"


SCALAR_PROPERTIES = frozenset(name.value for name in PropertyName)
COLLECTION_PROPERTIES = frozenset(name.value for name in CollectionName)

_LEGACY_SCOPE_MAP = {
    LegacyScope.PRIVATE.value: Scope.LOCAL,
    LegacyScope.CONTACTS_ONLY.value: Scope.FEDERATED,
    LegacyScope.PUBLIC.value: Scope.PUBLISHED,
}


def is_collection(name: str) -> bool:
    """Whether the attribute may hold several properties."""
    return name in COLLECTION_PROPERTIES


def map_scope_to_v2(scope: Optional[str]) -> Scope:
    """
    Map any stored scope onto the current Scope encoding.

    Current values pass through, legacy values are translated and
    anything unrecognized (including None and "") becomes Scope.LOCAL.
    The mapping is idempotent.
    """
    if scope is None:
        return Scope.LOCAL
    value = scope.value if isinstance(scope, Enum) else str(scope)
    try:
        return Scope(value)
    except ValueError:
        return _LEGACY_SCOPE_MAP.get(value, Scope.LOCAL)


def parse_verification_status(raw: object) -> VerificationStatus:
    """Read a stored status; missing or unknown values mean not verified."""
    if isinstance(raw, VerificationStatus):
        return raw
    if raw is None or isinstance(raw, bool):
        return VerificationStatus.NOT_VERIFIED
    try:
        return VerificationStatus(str(raw))
    except ValueError:
        return VerificationStatus.NOT_VERIFIED


# =============================================================================
# PROPERTY MODELS
# =============================================================================

class AccountProperty(BaseModel):
    """
    A single profile attribute value.

    Instances are mutable: validators and the verification tracker
    update value, scope and verified in place.

    scope is kept as a plain string because stored records may still
    carry legacy or invalid scopes until they are sanitized.
    """

    name: str = Field(
        ...,
        min_length=1,
        description="Attribute name (see PropertyName / CollectionName)"
    )
    value: str = Field(
        default="",
        description="Attribute value; empty means unset"
    )
    scope: str = Field(
        default=Scope.LOCAL.value,
        description="Visibility scope"
    )
    verified: VerificationStatus = Field(
        default=VerificationStatus.NOT_VERIFIED,
        description="Verification status"
    )
    verification_data: str = Field(
        default="",
        description="Opaque data used by the verification process"
    )

    @field_validator("scope", mode="before")
    @classmethod
    def scope_as_string(cls, v: object) -> object:
        """Accept Scope / LegacyScope members as well as raw strings."""
        if isinstance(v, Enum):
            return v.value
        return v

    def to_dict(self) -> dict:
        """Convert to a JSON-ready dictionary."""
        return {
            "name": self.name,
            "value": self.value,
            "scope": self.scope,
            "verified": self.verified.value,
            "verificationData": self.verification_data,
        }


class PropertyCollection:
    """
    Ordered list of properties sharing one collection attribute name.

    Usage:
        collection = PropertyCollection(CollectionName.ADDITIONAL_EMAIL.value)
        collection.add_property(AccountProperty(name=collection.name, value="a@example.com"))
    """

    def __init__(self, name: str):
        self.name = name
        self._properties: list[AccountProperty] = []

    def _check_name(self, prop: AccountProperty) -> None:
        if prop.name != self.name:
            raise ValueError(
                f"Property {prop.name} cannot be added to collection {self.name}"
            )

    def add_property(self, prop: AccountProperty) -> "PropertyCollection":
        self._check_name(prop)
        self._properties.append(prop)
        return self

    def set_properties(self, properties: list[AccountProperty]) -> "PropertyCollection":
        """Replace all elements."""
        for prop in properties:
            self._check_name(prop)
        self._properties = list(properties)
        return self

    def remove_property(self, prop: AccountProperty) -> "PropertyCollection":
        """Remove the given element (by identity); unknown elements are ignored."""
        self._properties = [p for p in self._properties if p is not prop]
        return self

    def remove_property_by_value(self, value: str) -> "PropertyCollection":
        self._properties = [p for p in self._properties if p.value != value]
        return self

    def get_property_by_value(self, value: str) -> Optional[AccountProperty]:
        for prop in self._properties:
            if prop.value == value:
                return prop
        return None

    def get_properties(self) -> list[AccountProperty]:
        return list(self._properties)

    def __iter__(self) -> Iterator[AccountProperty]:
        return iter(list(self._properties))

    def __len__(self) -> int:
        return len(self._properties)

    def to_list(self) -> list[dict]:
        return [prop.to_dict() for prop in self._properties]
