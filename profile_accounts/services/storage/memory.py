"""
In-Memory Storage Implementation

Keeps both tables in process memory. Used by the test-suite and for
embedding the account store where no database is available.

TRADEOFFS:
- Nothing survives the process
- No transactions: transaction() is the interface's no-op default
"""

from typing import Optional

from profile_accounts.services.storage.interface import (
    AccountStorageInterface,
    DuplicateError,
    IndexRow,
    NotFoundError,
)


class InMemoryAccountStorage(AccountStorageInterface):
    """Dictionary-backed account storage."""

    def __init__(self):
        self._blobs: dict[str, str] = {}
        self._rows: list[IndexRow] = []

    def fetch_blob(self, uid: str) -> Optional[str]:
        return self._blobs.get(uid)

    def insert_blob(self, uid: str, data: str) -> None:
        if uid in self._blobs:
            raise DuplicateError(f"Account record for {uid} already exists")
        self._blobs[uid] = data

    def update_blob(self, uid: str, data: str) -> None:
        if uid not in self._blobs:
            raise NotFoundError(f"No account record for {uid}")
        self._blobs[uid] = data

    def delete_blob(self, uid: str) -> None:
        self._blobs.pop(uid, None)

    def delete_index_rows(self, uid: str) -> None:
        self._rows = [row for row in self._rows if row.uid != uid]

    def insert_index_rows(self, uid: str, rows: list[tuple[str, str]]) -> None:
        self._rows.extend(IndexRow(uid=uid, name=name, value=value) for name, value in rows)

    def select_index_rows(self, name: str, values: list[str]) -> list[IndexRow]:
        wanted = set(values)
        return [row for row in self._rows if row.name == name and row.value in wanted]

    def index_rows(self, uid: Optional[str] = None) -> list[IndexRow]:
        """All flattened rows, optionally of one user."""
        return [row for row in self._rows if uid is None or row.uid == uid]
