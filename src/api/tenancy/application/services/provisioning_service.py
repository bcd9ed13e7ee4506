"""Provisioning orchestrator: creates a tenant across the identity provider
and local storage as one saga.

Steps, strictly in order:

1. check_local_uniqueness     fail fast on a taken subdomain or email
2. create_identity_user       compensation: delete the user
3. create_identity_organization  compensation: delete the organization
   Both identity-provider creates are tagged with a per-attempt id. When
   one times out, the record is looked up by email or slug and deleted
   only if it carries that id.
4. link_identity_metadata     best-effort unless strict_identity_link
5. resolve_template
6. persist_local_tenant       tenant row, branding and admin user in one
                              storage transaction
7. welcome email              fire-and-forget, after the saga succeeds

A failure at any compensable step undoes the completed identity-provider
steps in reverse order and re-raises the original error, so no partial
tenant is ever left behind. Local writes need no compensation: they are
the last step and roll back as a single transaction.

Failures that are not tenancy errors surface as ``InternalError``.
"""

from __future__ import annotations

from ulid import ULID

from shared_kernel.middleware import tenant_context
from shared_kernel.saga import Saga, SagaProbe, SagaState, SagaStep, StepTimeoutError
from storage.application.client import StorageClient
from storage.ports.exceptions import IsolationViolation
from tenancy.application.notifications import WelcomeNotifier
from tenancy.application.observability import (
    DefaultProvisioningProbe,
    ProvisioningProbe,
)
from tenancy.application.templates import TemplateResolver, resolve_preset
from tenancy.application.value_objects import (
    ProvisioningRequest,
    ProvisioningResult,
    ValidatedProvisioningRequest,
)
from tenancy.domain.aggregates import Tenant
from tenancy.domain.value_objects import UserRole
from tenancy.ports.exceptions import (
    EmailTakenError,
    IdentityConflictError,
    IdentityDuplicateEmailError,
    IdentityDuplicateSlugError,
    IdentityProviderError,
    InternalError,
    SubdomainTakenError,
    TenancyError,
    UpstreamError,
    ValidationError,
)
from tenancy.ports.identity import IdentityOrganization, IdentityProvider, IdentityUser
from tenancy.ports.repositories import (
    IBrandingRepository,
    ITenantRepository,
    IUserRepository,
)

SAGA_NAME = "tenant_provisioning"

CHECK_LOCAL_UNIQUENESS = "check_local_uniqueness"
CREATE_IDENTITY_USER = "create_identity_user"
CREATE_IDENTITY_ORGANIZATION = "create_identity_organization"
LINK_IDENTITY_METADATA = "link_identity_metadata"
RESOLVE_TEMPLATE = "resolve_template"
PERSIST_LOCAL_TENANT = "persist_local_tenant"

ATTEMPT_KEY = "provisioning_attempt"


class ProvisioningService:
    """Application service running the tenant provisioning saga."""

    def __init__(
        self,
        storage: StorageClient,
        tenant_repository: ITenantRepository,
        user_repository: IUserRepository,
        branding_repository: IBrandingRepository,
        template_resolver: TemplateResolver,
        identity_provider: IdentityProvider,
        notifier: WelcomeNotifier | None = None,
        step_timeout: float | None = None,
        strict_identity_link: bool = False,
        probe: ProvisioningProbe | None = None,
        saga_probe: SagaProbe | None = None,
    ):
        self._storage = storage
        self._tenants = tenant_repository
        self._users = user_repository
        self._branding = branding_repository
        self._templates = template_resolver
        self._identity = identity_provider
        self._notifier = notifier
        self._step_timeout = step_timeout
        self._strict_identity_link = strict_identity_link
        self._probe = probe or DefaultProvisioningProbe()
        self._saga_probe = saga_probe

    async def provision(self, request: ProvisioningRequest) -> ProvisioningResult:
        """Create a tenant, its identity-provider user and organization.

        Raises:
            ValidationError: Missing or malformed input; nothing was created
            SubdomainTakenError: The subdomain is taken locally
            EmailTakenError: The email is registered locally
            IdentityConflictError: The identity provider refused a duplicate
            UpstreamError: The identity provider failed or a step timed out
            InternalError: Any other failure, after compensation
        """
        try:
            validated = request.validated()
        except ValidationError as e:
            self._probe.provisioning_rejected(reason=e.message, subdomain=request.subdomain)
            raise

        self._probe.provisioning_started(
            subdomain=validated.subdomain.value, email=validated.email.value
        )

        saga = Saga(SAGA_NAME, self._steps(validated), probe=self._saga_probe)
        try:
            state = await saga.run()
        except TenancyError as e:
            self._probe.provisioning_failed(
                subdomain=validated.subdomain.value, kind=e.kind, message=e.message
            )
            raise
        except StepTimeoutError as e:
            error = UpstreamError(f"Provisioning timed out during {e.step}")
            self._probe.provisioning_failed(
                subdomain=validated.subdomain.value,
                kind=error.kind,
                message=error.message,
            )
            raise error from e
        except IsolationViolation:
            self._probe.provisioning_failed(
                subdomain=validated.subdomain.value,
                kind=InternalError.kind,
                message="Tenant isolation violation",
            )
            raise
        except Exception as e:
            internal = InternalError()
            self._probe.provisioning_failed(
                subdomain=validated.subdomain.value,
                kind=internal.kind,
                message=f"{type(e).__name__}: {e}",
            )
            raise internal from e

        tenant: Tenant = state[PERSIST_LOCAL_TENANT]
        user: IdentityUser = state[CREATE_IDENTITY_USER]
        organization: IdentityOrganization = state[CREATE_IDENTITY_ORGANIZATION]

        self._probe.provisioning_succeeded(
            tenant_id=tenant.id.value,
            subdomain=tenant.subdomain,
            identity_org_id=organization.id,
        )

        if self._notifier is not None:
            self._notifier.dispatch(
                email=validated.email.value,
                business_name=validated.business_name,
                subdomain=tenant.subdomain,
                tenant_id=tenant.id.value,
            )

        return ProvisioningResult(
            tenant_id=tenant.id.value,
            identity_user_id=user.id,
            identity_org_id=organization.id,
        )

    def _steps(self, request: ValidatedProvisioningRequest) -> list[SagaStep]:
        attempt = str(ULID())

        async def check_local_uniqueness(state: SagaState) -> None:
            if await self._tenants.get_by_subdomain(request.subdomain.value) is not None:
                raise SubdomainTakenError()
            if await self._users.get_by_email(request.email.value) is not None:
                raise EmailTakenError()

        async def create_identity_user(state: SagaState) -> IdentityUser:
            try:
                return await self._identity.create_user(
                    email=request.email.value,
                    password=request.password,
                    first_name=request.business_name,
                    public_metadata={
                        "role": UserRole.TENANT_ADMIN.value,
                        ATTEMPT_KEY: attempt,
                    },
                )
            except IdentityDuplicateEmailError as e:
                raise IdentityConflictError(
                    "Email is already registered in our system. Please login instead."
                ) from e
            except IdentityProviderError as e:
                raise UpstreamError(
                    f"Authentication Error: {e.message or 'Failed to create user'}"
                ) from e

        async def delete_identity_user(state: SagaState) -> None:
            await self._identity.delete_user(state[CREATE_IDENTITY_USER].id)

        async def reclaim_identity_user(state: SagaState) -> None:
            user = await self._identity.find_user_by_email(request.email.value)
            if user is not None and user.public_metadata.get(ATTEMPT_KEY) == attempt:
                await self._identity.delete_user(user.id)

        async def create_identity_organization(state: SagaState) -> IdentityOrganization:
            try:
                return await self._identity.create_organization(
                    name=request.business_name,
                    slug=request.subdomain.value,
                    created_by=state[CREATE_IDENTITY_USER].id,
                    public_metadata={
                        "license_token": request.license_token,
                        "country_code": request.country_code.value,
                        ATTEMPT_KEY: attempt,
                    },
                )
            except IdentityDuplicateSlugError as e:
                raise IdentityConflictError(
                    "Organization URL/Slug is already taken."
                ) from e
            except IdentityProviderError as e:
                raise UpstreamError(
                    f"Organization Error: {e.message or 'Failed to create organization'}"
                ) from e

        async def delete_identity_organization(state: SagaState) -> None:
            await self._identity.delete_organization(
                state[CREATE_IDENTITY_ORGANIZATION].id
            )

        async def reclaim_identity_organization(state: SagaState) -> None:
            organization = await self._identity.find_organization_by_slug(
                request.subdomain.value
            )
            if (
                organization is not None
                and organization.public_metadata.get(ATTEMPT_KEY) == attempt
            ):
                await self._identity.delete_organization(organization.id)

        async def link_identity_metadata(state: SagaState) -> None:
            try:
                await self._identity.update_user_metadata(
                    state[CREATE_IDENTITY_USER].id,
                    {
                        "role": UserRole.TENANT_ADMIN.value,
                        "tenant_id": state[CREATE_IDENTITY_ORGANIZATION].id,
                    },
                )
            except IdentityProviderError as e:
                raise UpstreamError(f"Account Link Error: {e.message}") from e

        async def resolve_template(state: SagaState):
            template = await self._templates.resolve(request.template_id)
            preset_name, preset = resolve_preset(request.template_id)
            self._probe.template_resolved(template_slug=template.slug, preset=preset_name)
            return template, preset_name, preset

        async def persist_local_tenant(state: SagaState) -> Tenant:
            template, preset_name, preset = state[RESOLVE_TEMPLATE]
            tenant = Tenant.create(
                business_name=request.business_name,
                subdomain=request.subdomain,
                country_code=request.country_code,
                identity_org_id=state[CREATE_IDENTITY_ORGANIZATION].id,
                license_token=request.license_token,
                template_id=template.id,
                template_preset=preset_name,
                contact_info=request.contact_info,
            )
            async with self._storage.transaction():
                tenant = await self._tenants.add(tenant)
                with tenant_context.bind(tenant.id.value):
                    await self._branding.create(
                        primary_color=preset.primary_color,
                        secondary_color=preset.secondary_color,
                        accent_color=preset.accent_color,
                        font_family=preset.font_family,
                    )
                await self._users.attach_tenant_admin(
                    email=request.email.value,
                    name=request.business_name,
                    tenant_id=tenant.id,
                )
            return tenant

        return [
            SagaStep(
                name=CHECK_LOCAL_UNIQUENESS,
                action=check_local_uniqueness,
                timeout=self._step_timeout,
            ),
            SagaStep(
                name=CREATE_IDENTITY_USER,
                action=create_identity_user,
                compensation=delete_identity_user,
                timeout=self._step_timeout,
                on_timeout=reclaim_identity_user,
            ),
            SagaStep(
                name=CREATE_IDENTITY_ORGANIZATION,
                action=create_identity_organization,
                compensation=delete_identity_organization,
                timeout=self._step_timeout,
                on_timeout=reclaim_identity_organization,
            ),
            SagaStep(
                name=LINK_IDENTITY_METADATA,
                action=link_identity_metadata,
                best_effort=not self._strict_identity_link,
                timeout=self._step_timeout,
            ),
            SagaStep(
                name=RESOLVE_TEMPLATE,
                action=resolve_template,
                timeout=self._step_timeout,
            ),
            SagaStep(
                name=PERSIST_LOCAL_TENANT,
                action=persist_local_tenant,
                timeout=self._step_timeout,
            ),
        ]
