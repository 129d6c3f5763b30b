"""Property validation package."""

from profile_accounts.validation.validator import (
    ALLOWED_SCOPES,
    MAX_VALUE_LENGTH,
    InvalidValueError,
    check_property_scope,
    check_value_lengths,
    parse_phone_number,
    parse_website,
    sanitize_phone,
    sanitize_property_values,
    sanitize_website,
    validate_properties,
)

__all__ = [
    "ALLOWED_SCOPES",
    "MAX_VALUE_LENGTH",
    "InvalidValueError",
    "check_property_scope",
    "check_value_lengths",
    "parse_phone_number",
    "parse_website",
    "sanitize_phone",
    "sanitize_property_values",
    "sanitize_website",
    "validate_properties",
]
