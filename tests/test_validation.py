"""Tests for property validation and sanitizing."""

import pytest

from profile_accounts.models import AccountProperty, LegacyScope, Scope
from profile_accounts.validation import (
    InvalidValueError,
    check_property_scope,
    check_value_lengths,
    parse_phone_number,
    parse_website,
    sanitize_phone,
    sanitize_property_values,
    sanitize_website,
    validate_properties,
)


class TestPhoneNumbers:

    def test_international_number_without_region(self):
        assert sanitize_phone("+14155552671", "") == "+14155552671"

    def test_national_number_without_region_fails(self):
        with pytest.raises(InvalidValueError) as exc_info:
            sanitize_phone("4155552671", "")
        assert exc_info.value.kind == InvalidValueError.PHONE

    def test_national_number_with_region(self):
        assert parse_phone_number("(415) 555-2671", "US") == "+14155552671"

    def test_formatting_is_normalized(self):
        assert parse_phone_number("+1 415-555-2671") == "+14155552671"

    @pytest.mark.parametrize("raw", ["not a number", "+1 123", "+"])
    def test_invalid_numbers(self, raw):
        with pytest.raises(InvalidValueError):
            parse_phone_number(raw, "US")

    def test_permissive_mode_clears_invalid_number(self):
        assert sanitize_phone("4155552671", "", strict=False) == ""

    def test_empty_value_is_left_alone(self):
        assert sanitize_phone("", "") == ""


class TestWebsites:

    def test_https_is_returned_unchanged(self):
        assert sanitize_website("https://example.com") == "https://example.com"

    def test_http_with_path_is_returned_unchanged(self):
        url = "http://example.com/~alice/?tab=about"
        assert parse_website(url) == url

    @pytest.mark.parametrize("url", [
        "ftp://example.com",
        "example.com",
        "https://",
        "mailto:alice@example.com",
        "javascript:alert(1)",
        "HTTPS://example.com",
        "Http://example.com",
    ])
    def test_rejected(self, url):
        with pytest.raises(InvalidValueError) as exc_info:
            sanitize_website(url)
        assert exc_info.value.kind == InvalidValueError.WEBSITE

    def test_permissive_mode_clears_invalid_url(self):
        assert sanitize_website("ftp://example.com", strict=False) == ""


class TestSanitizePropertyValues:

    def test_only_phone_and_website_are_touched(self):
        props = [
            AccountProperty(name="phone", value="+1 415 555 2671"),
            AccountProperty(name="website", value="ftp://example.com"),
            AccountProperty(name="address", value="ftp://example.com"),
        ]
        sanitize_property_values(props, default_region="", strict=False)
        assert [p.value for p in props] == ["+14155552671", "", "ftp://example.com"]

    def test_strict_raises(self):
        with pytest.raises(InvalidValueError):
            sanitize_property_values([AccountProperty(name="website", value="nope")])


class TestValueLengths:

    def test_2048_characters_are_accepted(self):
        prop = AccountProperty(name="address", value="a" * 2048)
        check_value_lengths([prop], strict=True)
        assert len(prop.value) == 2048

    def test_2049_characters_fail_strict(self):
        prop = AccountProperty(name="address", value="a" * 2049)
        with pytest.raises(InvalidValueError) as exc_info:
            check_value_lengths([prop], strict=True)
        assert exc_info.value.kind == InvalidValueError.LENGTH

    def test_2049_characters_are_cleared_permissive(self):
        prop = AccountProperty(name="address", value="a" * 2049)
        check_value_lengths([prop], strict=False)
        assert prop.value == ""


class TestPropertyScope:

    @pytest.mark.parametrize("name", ["displayname", "email"])
    def test_private_identity_fields_fail_strict(self, name):
        prop = AccountProperty(name=name, value="x", scope=Scope.PRIVATE.value)
        with pytest.raises(InvalidValueError) as exc_info:
            check_property_scope(prop, strict=True)
        assert exc_info.value.kind == InvalidValueError.SCOPE

    @pytest.mark.parametrize("name", ["displayname", "email"])
    def test_private_identity_fields_floor_to_local(self, name):
        prop = AccountProperty(name=name, value="x", scope=Scope.PRIVATE.value)
        check_property_scope(prop, strict=False)
        assert prop.scope == Scope.LOCAL.value

    def test_other_fields_may_be_private(self):
        prop = AccountProperty(name="phone", scope=Scope.PRIVATE.value)
        check_property_scope(prop, strict=True)
        assert prop.scope == Scope.PRIVATE.value

    def test_unknown_scope_fails_strict(self):
        prop = AccountProperty(name="phone", scope="everyone")
        with pytest.raises(InvalidValueError):
            check_property_scope(prop, strict=True)

    def test_unknown_scope_maps_to_local_permissive(self):
        prop = AccountProperty(name="phone", scope="everyone")
        check_property_scope(prop, strict=False)
        assert prop.scope == Scope.LOCAL.value

    def test_legacy_scope_is_migrated(self):
        prop = AccountProperty(name="displayname", scope=LegacyScope.PUBLIC.value)
        check_property_scope(prop, strict=True)
        assert prop.scope == Scope.PUBLISHED.value

    def test_legacy_private_on_email_is_migrated_not_rejected(self):
        prop = AccountProperty(name="email", scope=LegacyScope.PRIVATE.value)
        check_property_scope(prop, strict=True)
        assert prop.scope == Scope.LOCAL.value


class TestValidateProperties:

    def test_runs_all_checks(self):
        props = [
            AccountProperty(name="phone", value="+14155552671", scope=LegacyScope.CONTACTS_ONLY.value),
            AccountProperty(name="website", value="https://example.com", scope=Scope.PUBLISHED.value),
        ]
        validate_properties(props, default_region="", strict=True)
        assert props[0].scope == Scope.FEDERATED.value
        assert props[1].value == "https://example.com"

    def test_first_failure_propagates(self):
        props = [AccountProperty(name="address", value="a" * 3000)]
        with pytest.raises(InvalidValueError):
            validate_properties(props, strict=True)

    def test_custom_length_limit(self):
        props = [AccountProperty(name="address", value="abcdef")]
        validate_properties(props, strict=False, max_length=3)
        assert props[0].value == ""
