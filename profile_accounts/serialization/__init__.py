"""Account record serialization package."""

from profile_accounts.serialization.codec import (
    MalformedStorageError,
    decode,
    encode,
    parse_blob,
)

__all__ = ["MalformedStorageError", "decode", "encode", "parse_blob"]
