"""
Storage Services Package

Provides the abstract account storage interface and its implementations:
in-memory (tests, embedding) and SQL through SQLAlchemy.
"""

from profile_accounts.services.storage.interface import (
    AccountStorageInterface,
    ConnectionError,
    DuplicateError,
    IndexRow,
    NotFoundError,
    StorageError,
)
from profile_accounts.services.storage.memory import InMemoryAccountStorage
from profile_accounts.services.storage.sql import SqlAccountStorage, build_tables

__all__ = [
    # Interface
    "AccountStorageInterface",
    "IndexRow",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAccountStorage",
    "SqlAccountStorage",
    "build_tables",
]
