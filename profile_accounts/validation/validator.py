"""
Property Validation

DESIGN DECISION: Validation runs in one of two modes:

STRICT (user-initiated updates):
- Invalid input raises InvalidValueError
- Nothing is silently changed except normalization of valid values
  (E.164 phone numbers, legacy scope migration)

PERMISSIVE (reading previously stored data):
- Invalid values are reset to ""
- Disallowed scopes are floored to a safe default

All checks are free functions without state. The AccountManager composes
them through validate_properties().
"""

from typing import Iterable, Optional
from urllib.parse import urlparse

import phonenumbers

from profile_accounts.models.property import (
    AccountProperty,
    LegacyScope,
    PropertyName,
    Scope,
    map_scope_to_v2,
)


MAX_VALUE_LENGTH = 2048

# Placeholder region for numbers that carry their own country code.
# phonenumbers ignores the region for "+..." input.
FALLBACK_PHONE_REGION = "EN"

ALLOWED_SCOPES = frozenset(
    [scope.value for scope in Scope] + [scope.value for scope in LegacyScope]
)

NO_PRIVATE_SCOPE_PROPERTIES = frozenset([
    PropertyName.DISPLAYNAME.value,
    PropertyName.EMAIL.value,
])


class InvalidValueError(ValueError):
    """A property failed strict validation."""

    PHONE = "phone"
    WEBSITE = "website"
    LENGTH = "length"
    SCOPE = "scope"

    def __init__(self, kind: str, message: Optional[str] = None):
        super().__init__(message or f"Invalid {kind}")
        self.kind = kind


# =============================================================================
# VALUE PARSERS
# =============================================================================

def parse_phone_number(raw: str, default_region: str = "") -> str:
    """
    Return the number in E.164 format.

    Without a default region only numbers starting with a country
    code ("+...") can be parsed.
    """
    region = default_region
    if not region:
        if not raw.startswith("+"):
            raise InvalidValueError(
                InvalidValueError.PHONE,
                "No default phone region configured and the number has no country code",
            )
        region = FALLBACK_PHONE_REGION

    try:
        number = phonenumbers.parse(raw, region)
    except phonenumbers.NumberParseException as e:
        raise InvalidValueError(InvalidValueError.PHONE, str(e)) from e

    if not phonenumbers.is_valid_number(number):
        raise InvalidValueError(InvalidValueError.PHONE, f"Not a valid phone number: {raw}")

    return phonenumbers.format_number(number, phonenumbers.PhoneNumberFormat.E164)


def parse_website(raw: str) -> str:
    """Accept http(s) URLs with a host. The URL is returned unchanged."""
    try:
        parts = urlparse(raw)
        hostname = parts.hostname
    except ValueError as e:
        raise InvalidValueError(InvalidValueError.WEBSITE, str(e)) from e
    # urlparse lowercases the scheme; the stored text must already be lower case
    scheme = raw.partition(":")[0]
    if scheme not in ("http", "https"):
        raise InvalidValueError(InvalidValueError.WEBSITE, f"Website must use http or https: {raw}")
    if not hostname:
        raise InvalidValueError(InvalidValueError.WEBSITE, f"Website has no host: {raw}")
    return raw


# =============================================================================
# SANITIZERS
# =============================================================================

def sanitize_phone(raw: str, default_region: str = "", strict: bool = True) -> str:
    """Normalize a phone number; permissive mode turns bad input into ""."""
    if raw == "":
        return raw
    try:
        return parse_phone_number(raw, default_region)
    except InvalidValueError:
        if strict:
            raise
        return ""


def sanitize_website(raw: str, strict: bool = True) -> str:
    """Check a website URL; permissive mode turns bad input into ""."""
    if raw == "":
        return raw
    try:
        return parse_website(raw)
    except InvalidValueError:
        if strict:
            raise
        return ""


def sanitize_property_values(
    properties: Iterable[AccountProperty],
    default_region: str = "",
    strict: bool = True,
) -> None:
    """Apply the per-attribute value sanitizers in place."""
    for prop in properties:
        if prop.name == PropertyName.PHONE.value:
            prop.value = sanitize_phone(prop.value, default_region, strict)
        elif prop.name == PropertyName.WEBSITE.value:
            prop.value = sanitize_website(prop.value, strict)


def check_value_lengths(
    properties: Iterable[AccountProperty],
    strict: bool = True,
    max_length: int = MAX_VALUE_LENGTH,
) -> None:
    for prop in properties:
        if len(prop.value) > max_length:
            if strict:
                raise InvalidValueError(
                    InvalidValueError.LENGTH,
                    f"Value of {prop.name} exceeds {max_length} characters",
                )
            prop.value = ""


def check_property_scope(
    prop: AccountProperty,
    strict: bool = True,
    allowed_scopes: frozenset = ALLOWED_SCOPES,
) -> None:
    """
    Enforce the scope rules of one property and migrate it to Scope.

    Display name and e-mail can never be private: strict mode rejects
    that, permissive mode falls back to Scope.LOCAL.
    """
    if strict and prop.scope not in allowed_scopes:
        raise InvalidValueError(InvalidValueError.SCOPE, f"Scope {prop.scope!r} is not allowed")

    if prop.scope == Scope.PRIVATE.value and prop.name in NO_PRIVATE_SCOPE_PROPERTIES:
        if strict:
            raise InvalidValueError(
                InvalidValueError.SCOPE,
                f"{prop.name} cannot be private",
            )
        prop.scope = Scope.LOCAL.value
    else:
        prop.scope = map_scope_to_v2(prop.scope).value


def validate_properties(
    properties: Iterable[AccountProperty],
    default_region: str = "",
    strict: bool = True,
    max_length: int = MAX_VALUE_LENGTH,
) -> None:
    """Run every check over the property list, mutating it in place."""
    properties = list(properties)
    check_value_lengths(properties, strict, max_length)
    sanitize_property_values(properties, default_region, strict)
    for prop in properties:
        check_property_scope(prop, strict)
