"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Run against any SQL database through SQLAlchemy
2. Use in-memory storage for testing
3. Keep the account logic decoupled from storage implementation

Two tables back every account:
- the blob table: one row per user, {uid, data}
- the index table: flattened {uid, name, value} rows used for search

The interface is intentionally low level. Deciding when to write which
table is the AccountManager's job.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, Optional

from pydantic import BaseModel, ConfigDict


class IndexRow(BaseModel):
    """One searchable (owner, name, value) tuple."""
    model_config = ConfigDict(frozen=True)

    uid: str
    name: str
    value: str


class AccountStorageInterface(ABC):
    """
    Abstract interface for account storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def fetch_blob(self, uid: str) -> Optional[str]:
        """
        Get the encoded record of a user.

        Returns:
            The stored blob, or None if the user has no record
        """
        pass

    @abstractmethod
    def insert_blob(self, uid: str, data: str) -> None:
        """
        Store the encoded record of a user without one.

        Raises:
            DuplicateError: If the user already has a record
        """
        pass

    @abstractmethod
    def update_blob(self, uid: str, data: str) -> None:
        """Replace the encoded record of a user."""
        pass

    @abstractmethod
    def delete_blob(self, uid: str) -> None:
        """Delete the encoded record of a user. No-op if absent."""
        pass

    @abstractmethod
    def delete_index_rows(self, uid: str) -> None:
        """Delete all flattened rows of a user. No-op if absent."""
        pass

    @abstractmethod
    def insert_index_rows(self, uid: str, rows: list[tuple[str, str]]) -> None:
        """
        Append flattened rows for a user.

        Args:
            uid: Owner of the rows
            rows: (name, value) pairs; duplicates are allowed
        """
        pass

    @abstractmethod
    def select_index_rows(self, name: str, values: list[str]) -> list[IndexRow]:
        """
        Find rows with the given name and any of the given values.

        Implementations issue one query (name = ? AND value IN (...)).
        Callers keep the value list within the backend's parameter limit.
        """
        pass

    @contextmanager
    def transaction(self, uid: str) -> Iterator[None]:
        """
        Group the writes for one user.

        The default runs every statement on its own, so blob and index
        rows of a user can briefly disagree. Backends with transactions
        override this.
        """
        yield


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
