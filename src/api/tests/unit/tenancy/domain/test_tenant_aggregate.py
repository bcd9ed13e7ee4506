"""Unit tests for the Tenant aggregate."""

from __future__ import annotations

import pytest

from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import CountryCode, Subdomain
from tenancy.ports.exceptions import ValidationError


@pytest.fixture
def tenant() -> Tenant:
    return Tenant.create(
        business_name="Acme Dispensary",
        subdomain=Subdomain.from_string("acme"),
        country_code=CountryCode.from_string("pt"),
        identity_org_id="org_1",
        license_token="nft-42",
        template_id="tpl_1",
        template_preset="medical",
        contact_info={"phone": "123"},
    )


class TestCreate:
    def test_create_builds_active_tenant_with_links_in_settings(self, tenant):
        assert tenant.is_active is True
        assert tenant.subdomain == "acme"
        assert tenant.country_code == "PT"
        assert tenant.identity_org_id == "org_1"
        assert tenant.settings == {
            "identity_org_id": "org_1",
            "contact_info": {"phone": "123"},
            "template_preset": "medical",
        }

    def test_local_id_is_independent_of_org_id(self, tenant):
        assert tenant.id.value != "org_1"
        assert len(tenant.id.value) == 26


class TestActivation:
    def test_activate_and_deactivate(self, tenant):
        tenant.deactivate()
        assert tenant.is_active is False
        tenant.activate()
        assert tenant.is_active is True

    def test_toggle_returns_new_value(self, tenant):
        assert tenant.toggle_active() is False
        assert tenant.toggle_active() is True


class TestUpdateProfile:
    def test_updates_name_and_custom_domain(self, tenant):
        tenant.update_profile(business_name=" Acme Ltd ", custom_domain="Shop.Acme.io")

        assert tenant.business_name == "Acme Ltd"
        assert tenant.custom_domain == "shop.acme.io"

    def test_empty_custom_domain_clears_it(self, tenant):
        tenant.update_profile(custom_domain="shop.acme.io")
        tenant.update_profile(custom_domain="")

        assert tenant.custom_domain is None

    def test_settings_are_shallow_merged(self, tenant):
        tenant.update_profile(settings={"contact_info": {"email": "x@acme.io"}, "theme": "dark"})

        assert tenant.settings["contact_info"] == {"email": "x@acme.io"}
        assert tenant.settings["theme"] == "dark"
        assert tenant.settings["identity_org_id"] == "org_1"

    def test_identity_link_cannot_be_overwritten(self, tenant):
        with pytest.raises(ValidationError):
            tenant.update_profile(settings={"identity_org_id": "org_evil"})
        assert tenant.identity_org_id == "org_1"

    def test_subdomain_cannot_be_changed(self, tenant):
        with pytest.raises(ValidationError) as exc_info:
            tenant.update_profile(subdomain="other")
        assert exc_info.value.message == "Subdomain cannot be changed"

    def test_same_subdomain_is_accepted(self, tenant):
        tenant.update_profile(subdomain="ACME")
        assert tenant.subdomain == "acme"

    def test_blank_business_name_rejected(self, tenant):
        with pytest.raises(ValidationError):
            tenant.update_profile(business_name="   ")
