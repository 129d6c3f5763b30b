"""Configuration package."""

from profile_accounts.config.settings import (
    AccountSettings,
    Settings,
    get_settings,
    validate_all_settings,
)

__all__ = [
    "AccountSettings",
    "Settings",
    "get_settings",
    "validate_all_settings",
]
