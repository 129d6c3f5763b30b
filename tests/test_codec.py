"""Tests for the account record codec."""

import json
from unittest.mock import MagicMock

import pytest

from profile_accounts.audit import AuditLogger
from profile_accounts.models import (
    AccountProperty,
    CollectionName,
    Scope,
    VerificationStatus,
)
from profile_accounts.serialization import MalformedStorageError, decode, encode, parse_blob


MAIL = CollectionName.ADDITIONAL_EMAIL.value


@pytest.fixture
def properties():
    return [
        AccountProperty(name="displayname", value="Alice", scope=Scope.FEDERATED.value),
        AccountProperty(
            name="email",
            value="alice@example.com",
            scope=Scope.FEDERATED.value,
            verified=VerificationStatus.VERIFIED,
            verification_data="signature",
        ),
        AccountProperty(name="avatar", scope=Scope.PUBLISHED.value),
        AccountProperty(name=MAIL, value="second@example.com", scope=Scope.LOCAL.value),
        AccountProperty(
            name=MAIL,
            value="first@example.com",
            scope=Scope.PRIVATE.value,
            verified=VerificationStatus.VERIFICATION_IN_PROGRESS,
        ),
    ]


class TestEncode:

    def test_layout(self, properties):
        data = json.loads(encode(properties))
        assert list(data) == ["displayname", "email", "avatar", MAIL]
        assert data["email"] == {
            "value": "alice@example.com",
            "scope": "v2-federated",
            "verified": "2",
            "verificationData": "signature",
        }

    def test_name_is_not_repeated(self, properties):
        data = json.loads(encode(properties))
        assert "name" not in data["displayname"]
        assert all("name" not in row for row in data[MAIL])

    def test_avatar_has_no_value(self, properties):
        data = json.loads(encode(properties))
        assert "value" not in data["avatar"]
        assert data["avatar"]["scope"] == "v2-published"

    def test_collections_become_arrays(self, properties):
        data = json.loads(encode(properties))
        assert [row["value"] for row in data[MAIL]] == ["second@example.com", "first@example.com"]

    def test_empty_list(self):
        assert encode([]) == "{}"


class TestDecode:

    def test_round_trip(self, properties):
        assert decode(encode(properties), "alice") == properties

    def test_round_trip_ignores_group_order(self, properties):
        shuffled = [properties[3], properties[0], properties[4], properties[2], properties[1]]
        decoded = decode(encode(shuffled), "alice")
        assert sorted(decoded, key=lambda p: p.name) == sorted(properties, key=lambda p: p.name)
        assert [p.value for p in decoded if p.name == MAIL] == ["second@example.com", "first@example.com"]

    def test_missing_fields_get_defaults(self):
        blob = json.dumps({"phone": {"value": "+14155552671"}, "avatar": {"scope": "v2-local"}})
        phone, avatar = decode(blob, "alice")
        assert phone.verified == VerificationStatus.NOT_VERIFIED
        assert phone.scope == Scope.LOCAL.value
        assert phone.verification_data == ""
        assert avatar.value == ""

    def test_legacy_scope_is_kept_verbatim(self):
        blob = json.dumps({"address": {"value": "Main St", "scope": "contacts", "verified": 0}})
        (prop,) = decode(blob, "alice")
        assert prop.scope == "contacts"
        assert prop.verified == VerificationStatus.NOT_VERIFIED

    def test_invalid_json_returns_none_and_logs(self):
        audit_logger = MagicMock(spec=AuditLogger)
        assert decode("{not json", "alice", audit_logger) is None
        audit_logger.log_malformed_record.assert_called_once()
        assert audit_logger.log_malformed_record.call_args.args[0] == "alice"

    @pytest.mark.parametrize("blob", [
        "\"text\"",
        json.dumps({MAIL: {"value": "x@example.com"}}),
        json.dumps({"email": "alice@example.com"}),
        json.dumps({MAIL: ["x@example.com"]}),
    ])
    def test_unexpected_structure_is_malformed(self, blob):
        audit_logger = MagicMock(spec=AuditLogger)
        assert decode(blob, "alice", audit_logger) is None
        audit_logger.log_malformed_record.assert_called_once()

    def test_parse_blob_raises(self):
        with pytest.raises(MalformedStorageError):
            parse_blob("")

    def test_empty_object_decodes_to_empty_list(self):
        assert decode("{}", "alice") == []

    def test_empty_array_is_an_empty_record(self):
        audit_logger = MagicMock(spec=AuditLogger)
        assert decode("[]", "alice", audit_logger) == []
        audit_logger.log_malformed_record.assert_not_called()

    def test_non_empty_array_is_malformed(self):
        with pytest.raises(MalformedStorageError):
            parse_blob(json.dumps([{"value": "x"}]))
