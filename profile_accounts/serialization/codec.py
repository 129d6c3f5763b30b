"""
Account Record Codec

Converts between the flat property list used in memory and the JSON
blob stored once per user.

Blob layout:
    {
        "displayname": {"value": ..., "scope": ..., "verified": ..., "verificationData": ...},
        "avatar": {"scope": ..., "verified": ..., "verificationData": ...},
        "additional_mail": [{...}, {...}]
    }

The attribute name is the key and is not repeated inside the objects.
Collection attributes map to arrays, scalar attributes to objects.
"""

import json
from typing import Any, Iterable, Optional

from profile_accounts.audit import AuditLogger
from profile_accounts.models.property import (
    AccountProperty,
    PropertyName,
    Scope,
    is_collection,
    parse_verification_status,
)


class MalformedStorageError(ValueError):
    """A stored blob could not be turned back into properties."""
    pass


def _property_to_row(prop: AccountProperty) -> dict:
    row: dict[str, Any] = {}
    # The avatar is signalled by presence alone
    if prop.name != PropertyName.AVATAR.value:
        row["value"] = prop.value
    row["scope"] = prop.scope
    row["verified"] = prop.verified.value
    row["verificationData"] = prop.verification_data
    return row


def _row_to_property(name: str, row: Any) -> AccountProperty:
    if not isinstance(row, dict):
        raise MalformedStorageError(f"Entry for {name} is not an object")
    value = row.get("value")
    scope = row.get("scope")
    return AccountProperty(
        name=name,
        value="" if value is None else str(value),
        scope=Scope.LOCAL.value if scope is None else str(scope),
        verified=parse_verification_status(row.get("verified")),
        verification_data=str(row.get("verificationData") or ""),
    )


def encode(properties: Iterable[AccountProperty]) -> str:
    """Group properties by name and serialize them to the blob format."""
    prepared: dict[str, Any] = {}
    for prop in properties:
        row = _property_to_row(prop)
        if not is_collection(prop.name):
            prepared[prop.name] = row
            continue
        prepared.setdefault(prop.name, []).append(row)
    return json.dumps(prepared)


def parse_blob(blob: str) -> list[AccountProperty]:
    """
    Decode a blob, raising MalformedStorageError on any problem.

    Collection arrays expand to one property per element in array order.
    """
    try:
        data = json.loads(blob)
    except (TypeError, ValueError) as e:
        raise MalformedStorageError(f"Invalid JSON: {e}") from e

    # An empty record may be stored as a JSON array
    if data == []:
        return []

    if not isinstance(data, dict):
        raise MalformedStorageError("Account data is not a JSON object")

    result = []
    for name, row in data.items():
        if not is_collection(name):
            result.append(_row_to_property(name, row))
            continue
        if not isinstance(row, list):
            raise MalformedStorageError(f"Collection {name} is not an array")
        for single_row in row:
            result.append(_row_to_property(name, single_row))
    return result


def decode(
    blob: str,
    owner: str,
    audit_logger: Optional[AuditLogger] = None,
) -> Optional[list[AccountProperty]]:
    """
    Decode a stored blob.

    Returns None when the blob is malformed; callers treat that as
    "no valid record" and fall back to defaults. The failure is logged
    at critical level with the owner's uid.
    """
    try:
        return parse_blob(blob)
    except MalformedStorageError as e:
        (audit_logger or AuditLogger()).log_malformed_record(owner, str(e))
        return None
