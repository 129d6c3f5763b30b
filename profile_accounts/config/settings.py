"""
Configuration Management for Profile Accounts

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
Every tunable of the account store (phone region, value limits, search
chunking, storage location) is read from one place and validated at startup.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AccountSettings(BaseSettings):
    """
    Account store settings.
    
    Loads configuration from ACCOUNTS_* environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_prefix="ACCOUNTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    # Validation
    default_phone_region: str = Field(
        default="",
        description="ISO 3166 region used for phone numbers without a country code"
    )
    max_value_length: int = Field(
        default=2048,
        ge=1,
        description="Maximum length of a single property value"
    )
    
    # Search
    search_chunk_size: int = Field(
        default=500,
        ge=1,
        le=1000,
        description="Maximum number of values in one IN (...) lookup"
    )
    
    # Storage
    database_url: str = Field(
        default="sqlite:///accounts.db",
        description="SQLAlchemy database URL"
    )
    blob_table: str = Field(
        default="accounts",
        description="Table holding one encoded record per user"
    )
    index_table: str = Field(
        default="accounts_data",
        description="Table holding the flattened, searchable rows"
    )
    echo_sql: bool = Field(
        default=False,
        description="Log every SQL statement"
    )
    transactional_writes: bool = Field(
        default=True,
        description="Wrap blob and index writes of one save in a transaction"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Minimum level for the structured log"
    )
    
    @field_validator('default_phone_region')
    @classmethod
    def normalize_region(cls, v: str) -> str:
        """Region codes are upper case two-letter codes (or empty)."""
        return v.strip().upper()
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level


class Settings(BaseSettings):
    """
    Root settings container.
    
    Aggregates all sub-settings for easy access.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )
    
    @property
    def accounts(self) -> AccountSettings:
        return AccountSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.
    
    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}
    
    settings = get_settings()
    
    try:
        _ = settings.accounts
        results["accounts"] = True
    except Exception as e:
        results["accounts"] = False
        results["accounts_error"] = str(e)
    
    return results
