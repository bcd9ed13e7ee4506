"""Identity provider adapter for the Clerk Backend API."""

from __future__ import annotations

from typing import Any

import httpx

from tenancy.infrastructure.observability import (
    DefaultExternalServiceProbe,
    ExternalServiceProbe,
)
from tenancy.ports.exceptions import (
    IdentityDuplicateEmailError,
    IdentityDuplicateSlugError,
    IdentityProviderError,
)
from tenancy.ports.identity import IdentityOrganization, IdentityUser

SERVICE = "clerk"

_DUPLICATE_CODES = frozenset({"form_identifier_exists", "organization_slug_taken"})


class ClerkIdentityProvider:
    """IdentityProvider backed by Clerk's REST API.

    Errors come back as ``{"errors": [{"code", "message", "long_message",
    "meta": {"param_name"}}]}``; the first entry decides the exception type.
    """

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.clerk.com",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        probe: ExternalServiceProbe | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {secret_key}"},
            timeout=timeout,
            transport=transport,
        )
        self._probe = probe or DefaultExternalServiceProbe()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_user(
        self,
        email: str,
        password: str,
        first_name: str,
        public_metadata: dict[str, Any],
    ) -> IdentityUser:
        body = await self._request(
            "create_user",
            "POST",
            "/v1/users",
            json={
                "email_address": [email],
                "password": password,
                "first_name": first_name,
                "public_metadata": public_metadata,
            },
            duplicate=IdentityDuplicateEmailError,
        )
        return IdentityUser(id=_require_id(body, "create_user"), email=email)

    async def find_user_by_email(self, email: str) -> IdentityUser | None:
        body = await self._request(
            "find_user_by_email",
            "GET",
            "/v1/users",
            params={"email_address": [email]},
        )
        if not isinstance(body, list):
            raise IdentityProviderError("Malformed user list from identity provider")
        if not body:
            return None
        user = body[0]
        return IdentityUser(
            id=_require_id(user, "find_user_by_email"),
            email=email,
            public_metadata=user.get("public_metadata") or {},
        )

    async def delete_user(self, user_id: str) -> None:
        await self._request("delete_user", "DELETE", f"/v1/users/{user_id}")

    async def create_organization(
        self,
        name: str,
        slug: str,
        created_by: str,
        public_metadata: dict[str, Any],
    ) -> IdentityOrganization:
        body = await self._request(
            "create_organization",
            "POST",
            "/v1/organizations",
            json={
                "name": name,
                "slug": slug,
                "created_by": created_by,
                "public_metadata": public_metadata,
            },
            duplicate=IdentityDuplicateSlugError,
        )
        return IdentityOrganization(
            id=_require_id(body, "create_organization"),
            name=body.get("name", name),
            slug=body.get("slug", slug),
        )

    async def find_organization_by_slug(self, slug: str) -> IdentityOrganization | None:
        try:
            body = await self._request(
                "find_organization_by_slug", "GET", f"/v1/organizations/{slug}"
            )
        except IdentityProviderError as e:
            if e.status == 404:
                return None
            raise
        return IdentityOrganization(
            id=_require_id(body, "find_organization_by_slug"),
            name=body.get("name", ""),
            slug=body.get("slug", slug),
            public_metadata=body.get("public_metadata") or {},
        )

    async def delete_organization(self, organization_id: str) -> None:
        await self._request(
            "delete_organization", "DELETE", f"/v1/organizations/{organization_id}"
        )

    async def update_user_metadata(
        self, user_id: str, public_metadata: dict[str, Any]
    ) -> None:
        await self._request(
            "update_user_metadata",
            "PATCH",
            f"/v1/users/{user_id}/metadata",
            json={"public_metadata": public_metadata},
        )

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        duplicate: type[IdentityProviderError] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=json, params=params)
        except httpx.HTTPError as e:
            self._probe.request_failed(service=SERVICE, operation=operation, reason=repr(e))
            raise IdentityProviderError(str(e) or type(e).__name__) from e

        if response.is_success:
            self._probe.request_succeeded(
                service=SERVICE, operation=operation, status_code=response.status_code
            )
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as e:
                raise IdentityProviderError(
                    f"Unparseable {operation} response from identity provider",
                    status=response.status_code,
                ) from e

        code, message, param = self._parse_error(response)
        self._probe.request_failed(
            service=SERVICE,
            operation=operation,
            reason=message,
            status_code=response.status_code,
            code=code,
        )
        if duplicate is not None and (
            code in _DUPLICATE_CODES
            or (code == "form_param_value_invalid" and param == "slug")
        ):
            raise duplicate(message, code=code, status=response.status_code)
        raise IdentityProviderError(message, code=code, status=response.status_code)

    @staticmethod
    def _parse_error(response: httpx.Response) -> tuple[str | None, str, str | None]:
        try:
            body = response.json()
        except ValueError:
            body = None
        errors = body.get("errors") if isinstance(body, dict) else None
        if not errors:
            return None, f"HTTP {response.status_code}", None

        first = errors[0]
        message = first.get("long_message") or first.get("message") or ""
        param = (first.get("meta") or {}).get("param_name")
        return first.get("code"), message or f"HTTP {response.status_code}", param


def _require_id(body: Any, operation: str) -> str:
    if not isinstance(body, dict) or not body.get("id"):
        raise IdentityProviderError(f"Identity provider {operation} response has no id")
    return body["id"]
