"""Unit tests for the Clerk identity provider adapter."""

import json

import httpx
import pytest
import pytest_asyncio

from tenancy.infrastructure import ClerkIdentityProvider
from tenancy.ports.exceptions import (
    IdentityDuplicateEmailError,
    IdentityDuplicateSlugError,
    IdentityProviderError,
)


def clerk_error(status: int, code: str, param: str | None = None) -> "Recorder":
    error = {"code": code, "message": "failed", "long_message": f"{code} happened"}
    if param:
        error["meta"] = {"param_name": param}
    return Recorder(status, json={"errors": [error]})


class Recorder:
    """MockTransport handler answering every request with the same status and body."""

    def __init__(self, status: int, **content):
        self.status = status
        self.content = content
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, **self.content)


@pytest_asyncio.fixture
async def make_client():
    clients = []

    def factory(handler):
        client = ClerkIdentityProvider(
            "sk_test", base_url="https://clerk.test", transport=httpx.MockTransport(handler)
        )
        clients.append(client)
        return client

    yield factory
    for client in clients:
        await client.aclose()


class TestRequests:
    @pytest.mark.asyncio
    async def test_create_user_payload_and_auth(self, make_client):
        recorder = Recorder(200, json={"id": "user_1"})
        client = make_client(recorder)

        user = await client.create_user("o@acme.io", "s3cret!", "Acme", {"role": "TENANT_ADMIN"})

        assert user.id == "user_1"
        [request] = recorder.requests
        assert request.method == "POST"
        assert request.url.path == "/v1/users"
        assert request.headers["Authorization"] == "Bearer sk_test"
        assert json.loads(request.content) == {
            "email_address": ["o@acme.io"],
            "password": "s3cret!",
            "first_name": "Acme",
            "public_metadata": {"role": "TENANT_ADMIN"},
        }

    @pytest.mark.asyncio
    async def test_create_organization(self, make_client):
        recorder = Recorder(200, json={"id": "org_1", "slug": "acme"})
        client = make_client(recorder)

        org = await client.create_organization("Acme", "acme", "user_1", {"country_code": "PT"})

        assert (org.id, org.slug, org.name) == ("org_1", "acme", "Acme")
        assert json.loads(recorder.requests[0].content)["created_by"] == "user_1"

    @pytest.mark.asyncio
    async def test_deletes_and_metadata_update(self, make_client):
        recorder = Recorder(200, json={})
        client = make_client(recorder)

        await client.delete_user("user_1")
        await client.delete_organization("org_1")
        await client.update_user_metadata("user_1", {"tenant_id": "org_1"})

        assert [(r.method, r.url.path) for r in recorder.requests] == [
            ("DELETE", "/v1/users/user_1"),
            ("DELETE", "/v1/organizations/org_1"),
            ("PATCH", "/v1/users/user_1/metadata"),
        ]

    @pytest.mark.asyncio
    async def test_find_user_by_email(self, make_client):
        recorder = Recorder(
            200, json=[{"id": "user_7", "public_metadata": {"provisioning_attempt": "a1"}}]
        )
        client = make_client(recorder)

        user = await client.find_user_by_email("o@acme.io")

        assert user.id == "user_7"
        assert user.public_metadata == {"provisioning_attempt": "a1"}
        [request] = recorder.requests
        assert request.url.path == "/v1/users"
        assert request.url.params.get_list("email_address") == ["o@acme.io"]

    @pytest.mark.asyncio
    async def test_find_user_by_email_without_match(self, make_client):
        client = make_client(Recorder(200, json=[]))

        assert await client.find_user_by_email("o@acme.io") is None

    @pytest.mark.asyncio
    async def test_find_organization_by_slug(self, make_client):
        recorder = Recorder(200, json={"id": "org_3", "name": "Acme", "slug": "acme"})
        client = make_client(recorder)

        org = await client.find_organization_by_slug("acme")

        assert (org.id, org.slug) == ("org_3", "acme")
        assert recorder.requests[0].url.path == "/v1/organizations/acme"

    @pytest.mark.asyncio
    async def test_missing_organization_is_none(self, make_client):
        client = make_client(clerk_error(404, "resource_not_found"))

        assert await client.find_organization_by_slug("acme") is None


class TestErrors:
    @pytest.mark.asyncio
    async def test_duplicate_email(self, make_client):
        client = make_client(clerk_error(422, "form_identifier_exists"))

        with pytest.raises(IdentityDuplicateEmailError) as exc_info:
            await client.create_user("o@acme.io", "pw", "Acme", {})
        assert exc_info.value.message == "form_identifier_exists happened"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            clerk_error(422, "organization_slug_taken"),
            clerk_error(422, "form_param_value_invalid", param="slug"),
        ],
    )
    async def test_duplicate_slug(self, make_client, response):
        client = make_client(response)

        with pytest.raises(IdentityDuplicateSlugError):
            await client.create_organization("Acme", "acme", "user_1", {})

    @pytest.mark.asyncio
    async def test_other_error_codes_are_generic(self, make_client):
        client = make_client(clerk_error(422, "form_password_pwned"))

        with pytest.raises(IdentityProviderError) as exc_info:
            await client.create_user("o@acme.io", "pw", "Acme", {})

        assert not isinstance(exc_info.value, IdentityDuplicateEmailError)
        assert exc_info.value.code == "form_password_pwned"
        assert exc_info.value.status == 422

    @pytest.mark.asyncio
    async def test_non_json_error_body(self, make_client):
        client = make_client(Recorder(503, text="upstream down"))

        with pytest.raises(IdentityProviderError) as exc_info:
            await client.delete_user("user_1")

        assert exc_info.value.message == "HTTP 503"

    @pytest.mark.asyncio
    async def test_transport_error(self, make_client):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(IdentityProviderError):
            await client.create_user("o@acme.io", "pw", "Acme", {})

    @pytest.mark.asyncio
    async def test_unparseable_success_body(self, make_client):
        client = make_client(Recorder(200, text="<html>ok</html>"))

        with pytest.raises(IdentityProviderError) as exc_info:
            await client.create_user("o@acme.io", "pw", "Acme", {})

        assert exc_info.value.status == 200

    @pytest.mark.asyncio
    async def test_success_body_without_id(self, make_client):
        client = make_client(Recorder(200, json={"object": "organization"}))

        with pytest.raises(IdentityProviderError):
            await client.create_organization("Acme", "acme", "user_1", {})
