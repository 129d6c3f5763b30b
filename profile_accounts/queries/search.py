"""
Account Search

Finds the owners of given property values using only the flattened
index table. The blob table is never read here.

GUARANTEES:
- At most chunk_size values go into one IN (...) query
- Every matching value appears once in the result
- Results may lag behind concurrent saves; the index is advisory
"""

from typing import Iterable, Optional

from profile_accounts.config import get_settings
from profile_accounts.models.property import CollectionName, PropertyName
from profile_accounts.services.storage import AccountStorageInterface


# Collections searched alongside a scalar property
RELATED_COLLECTIONS = {
    PropertyName.EMAIL.value: CollectionName.ADDITIONAL_EMAIL.value,
}


def chunked(values: list[str], size: int) -> list[list[str]]:
    return [values[i:i + size] for i in range(0, len(values), size)]


class AccountSearch:
    """Value to owner lookup over the index table."""

    def __init__(
        self,
        storage: AccountStorageInterface,
        chunk_size: Optional[int] = None,
    ):
        self._storage = storage
        self._chunk_size = chunk_size or get_settings().accounts.search_chunk_size

    def search_users(self, property_name: str, values: Iterable[str]) -> dict[str, str]:
        """
        Map each matching value to the uid owning it.

        A value stored by several users maps to the one found last.
        Searching "email" also searches the additional e-mail addresses.
        """
        candidates = list(dict.fromkeys(values))
        matches = self._search_property(property_name, candidates)

        related = RELATED_COLLECTIONS.get(property_name)
        if related is not None:
            matches.update(self._search_property(related, candidates))

        return matches

    def _search_property(self, property_name: str, candidates: list[str]) -> dict[str, str]:
        matches: dict[str, str] = {}
        for chunk in chunked(candidates, self._chunk_size):
            for row in self._storage.select_index_rows(property_name, chunk):
                matches[row.value] = row.uid
        return matches
