"""Unit tests for Tenancy value objects."""

from __future__ import annotations

import pytest

from tenancy.domain.value_objects import (
    CountryCode,
    CustomDomain,
    EmailAddress,
    Subdomain,
    TenantId,
)
from tenancy.ports.exceptions import ValidationError


class TestTenantId:
    def test_generate_creates_valid_ulid(self):
        tenant_id = TenantId.generate()
        assert TenantId.from_string(tenant_id.value) == tenant_id

    def test_from_string_rejects_non_ulid(self):
        with pytest.raises(ValueError):
            TenantId.from_string("not-a-ulid")


class TestSubdomain:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("acme", "acme"), ("  Green-Leaf ", "green-leaf"), ("a1b", "a1b")],
    )
    def test_valid_subdomains_are_normalized(self, raw, expected):
        assert Subdomain.from_string(raw).value == expected

    @pytest.mark.parametrize(
        "raw", ["ab", "-acme", "acme-", "ac_me", "acme.shop", "a" * 64, ""]
    )
    def test_invalid_subdomains_rejected(self, raw):
        with pytest.raises(ValidationError):
            Subdomain.from_string(raw)

    @pytest.mark.parametrize("raw", ["www", "admin", "super-admin", "API"])
    def test_reserved_subdomains_rejected(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            Subdomain.from_string(raw)
        assert "reserved" in exc_info.value.message


class TestCustomDomain:
    def test_normalizes_case_and_trailing_dot(self):
        assert CustomDomain.from_string("Shop.Example.COM.").value == "shop.example.com"

    @pytest.mark.parametrize("raw", ["localhost", "bad_host.com", "-x.com", "a..com"])
    def test_rejects_invalid_hosts(self, raw):
        with pytest.raises(ValidationError):
            CustomDomain.from_string(raw)


class TestCountryAndEmail:
    def test_country_code_upper_cased(self):
        assert CountryCode.from_string(" pt ").value == "PT"

    @pytest.mark.parametrize("raw", ["P", "PRT", "1A", ""])
    def test_country_code_rejects_non_alpha2(self, raw):
        with pytest.raises(ValidationError):
            CountryCode.from_string(raw)

    def test_email_lower_cased(self):
        assert EmailAddress.from_string(" Owner@Acme.IO ").value == "owner@acme.io"

    @pytest.mark.parametrize("raw", ["owner", "owner@", "@acme.io", "a b@acme.io"])
    def test_email_rejects_malformed(self, raw):
        with pytest.raises(ValidationError):
            EmailAddress.from_string(raw)
