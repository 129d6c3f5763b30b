"""Account search package."""

from profile_accounts.queries.search import AccountSearch, chunked

__all__ = ["AccountSearch", "chunked"]
