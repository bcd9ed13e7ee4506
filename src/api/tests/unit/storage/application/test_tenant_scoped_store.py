"""Unit tests for the tenant-scoping interceptor.

Run against the in-memory store so the rewritten operations are checked
by their effect, not only by their shape.
"""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from shared_kernel.middleware import tenant_context
from storage.application import StorageClient, TenantScopedStore
from storage.ports.exceptions import IsolationViolation, RecordNotFound
from storage.ports.operations import Action, StorageOperation

TENANT_A = "01HZZZZZZZZZZZZZZZZZZZZZZA"
TENANT_B = "01HZZZZZZZZZZZZZZZZZZZZZZB"


@pytest_asyncio.fixture
async def seeded(memory_store, storage):
    """Two tenants with two products each, plus one shared email template."""
    for tenant_id in (TENANT_A, TENANT_B):
        with tenant_context.bind(tenant_id):
            await storage.model("products").create_many(
                [
                    {"name": f"Lamp {tenant_id[-1]}", "slug": "lamp", "price": 10},
                    {"name": f"Chair {tenant_id[-1]}", "slug": "chair", "price": 30},
                ]
            )
            await storage.model("email_templates").create(
                {"name": f"welcome-{tenant_id[-1]}", "subject": "Hi", "body": "<p/>"}
            )
    await memory_store.execute(
        StorageOperation(
            model="email_templates",
            action=Action.CREATE,
            args={"data": {"name": "default", "subject": "Hi", "body": "<p/>", "tenant_id": None}},
        )
    )
    return storage


class TestReadScoping:
    @pytest.mark.asyncio
    async def test_find_many_returns_only_bound_tenant_rows(self, seeded):
        with tenant_context.bind(TENANT_A):
            products = await seeded.model("products").find_many()

        assert {p["tenant_id"] for p in products} == {TENANT_A}
        assert len(products) == 2

    @pytest.mark.asyncio
    async def test_caller_cannot_widen_scope_with_or(self, seeded):
        with tenant_context.bind(TENANT_A):
            products = await seeded.model("products").find_many(
                where={"OR": [{"tenant_id": TENANT_B}, {"price": {"gte": 0}}]}
            )

        assert {p["tenant_id"] for p in products} == {TENANT_A}

    @pytest.mark.asyncio
    async def test_find_unique_on_foreign_row_is_none(self, seeded, memory_store):
        foreign = next(r for r in memory_store.rows("products") if r["tenant_id"] == TENANT_B)

        with tenant_context.bind(TENANT_A):
            found = await seeded.model("products").find_unique(where={"id": foreign["id"]})

        assert found is None

    @pytest.mark.asyncio
    async def test_count_aggregate_and_group_by_are_scoped(self, seeded):
        with tenant_context.bind(TENANT_B):
            count = await seeded.model("products").count()
            totals = await seeded.model("products").aggregate({"sum": ["price"], "count": True})
            groups = await seeded.model("products").group_by(by=["tenant_id"])

        assert count == 2
        assert totals == {"count": 2, "sum": {"price": 40}}
        assert groups == [{"tenant_id": TENANT_B, "count": 2}]

    @pytest.mark.asyncio
    async def test_allow_null_model_includes_shared_rows(self, seeded):
        with tenant_context.bind(TENANT_A):
            templates = await seeded.model("email_templates").find_many(order_by={"name": "asc"})

        assert [t["name"] for t in templates] == ["default", "welcome-A"]

    @pytest.mark.asyncio
    async def test_allow_null_model_without_tenant_sees_shared_rows_only(self, seeded):
        templates = await seeded.model("email_templates").find_many()

        assert [t["name"] for t in templates] == ["default"]

    @pytest.mark.asyncio
    async def test_strict_model_without_tenant_raises(self, seeded):
        with pytest.raises(IsolationViolation):
            await seeded.model("products").find_many()

    @pytest.mark.asyncio
    async def test_platform_models_pass_through(self, storage):
        tenant = await storage.model("tenants").create(
            {"business_name": "Acme", "subdomain": "acme"}
        )
        assert tenant["subdomain"] == "acme"
        assert "tenant_id" not in tenant


class TestWriteScoping:
    @pytest.mark.asyncio
    async def test_create_stamps_bound_tenant(self, storage):
        with tenant_context.bind(TENANT_A):
            product = await storage.model("products").create({"name": "Desk", "slug": "desk"})

        assert product["tenant_id"] == TENANT_A

    @pytest.mark.asyncio
    async def test_create_naming_another_tenant_is_refused(self, storage, memory_store):
        with tenant_context.bind(TENANT_A):
            with pytest.raises(IsolationViolation):
                await storage.model("products").create(
                    {"name": "Desk", "slug": "desk", "tenant_id": TENANT_B}
                )

        assert memory_store.rows("products") == []

    @pytest.mark.asyncio
    async def test_update_of_foreign_row_is_not_found_and_untouched(self, seeded, memory_store):
        foreign = next(r for r in memory_store.rows("products") if r["tenant_id"] == TENANT_B)

        with tenant_context.bind(TENANT_A):
            with pytest.raises(RecordNotFound):
                await seeded.model("products").update(
                    where={"id": foreign["id"]}, data={"price": 0}
                )

        unchanged = next(r for r in memory_store.rows("products") if r["id"] == foreign["id"])
        assert unchanged["price"] == foreign["price"]

    @pytest.mark.asyncio
    async def test_update_cannot_move_rows_to_another_tenant(self, seeded):
        with tenant_context.bind(TENANT_A):
            with pytest.raises(IsolationViolation):
                await seeded.model("products").update_many(
                    where={"slug": "lamp"}, data={"tenant_id": TENANT_B}
                )

    @pytest.mark.asyncio
    async def test_delete_many_only_touches_bound_tenant(self, seeded, memory_store):
        with tenant_context.bind(TENANT_A):
            deleted = await seeded.model("products").delete_many()

        assert deleted == 2
        assert {r["tenant_id"] for r in memory_store.rows("products")} == {TENANT_B}

    @pytest.mark.asyncio
    async def test_upsert_is_scoped_on_both_branches(self, seeded, memory_store):
        with tenant_context.bind(TENANT_A):
            updated = await seeded.model("products").upsert(
                where={"slug": "lamp"},
                create={"name": "Lamp", "slug": "lamp"},
                update={"price": 12},
            )
            created = await seeded.model("products").upsert(
                where={"slug": "sofa"},
                create={"name": "Sofa", "slug": "sofa"},
                update={"price": 99},
            )

        assert updated["tenant_id"] == TENANT_A and updated["price"] == 12
        assert created["tenant_id"] == TENANT_A
        lamp_b = next(
            r for r in memory_store.rows("products")
            if r["tenant_id"] == TENANT_B and r["slug"] == "lamp"
        )
        assert lamp_b["price"] == 10


class TestBypass:
    @pytest.mark.asyncio
    async def test_bypass_sees_every_tenant_and_is_reported(self, memory_store):
        probe = MagicMock()
        storage = StorageClient(TenantScopedStore(memory_store, probe=probe))
        for tenant_id in (TENANT_A, TENANT_B):
            with tenant_context.bind(tenant_id):
                await storage.model("users").create({"email": f"{tenant_id}@x.io", "name": "U"})

        with tenant_context.platform_bypass("admin listing"):
            users = await storage.model("users").find_many()

        assert len(users) == 2
        probe.scoping_bypassed.assert_called_once_with(
            model="users", action="find_many", reason="admin listing"
        )


class TestScopeRewrite:
    def test_find_unique_is_downgraded_to_find_first(self, scoped_store):
        with tenant_context.bind(TENANT_A):
            operation = scoped_store.scope(
                StorageOperation(model="products", action=Action.FIND_UNIQUE, args={"where": {"id": "1"}})
            )

        assert operation.action is Action.FIND_FIRST
        assert operation.args["where"] == {"AND": [{"id": "1"}, {"tenant_id": TENANT_A}]}
        assert operation.tenant_id == TENANT_A

    def test_violation_is_reported_to_probe(self, memory_store):
        probe = MagicMock()
        store = TenantScopedStore(memory_store, probe=probe)

        with pytest.raises(IsolationViolation):
            store.scope(StorageOperation(model="orders", action=Action.COUNT))

        probe.isolation_violation.assert_called_once_with(
            model="orders", action="count", reason="no tenant bound", tenant_id=None
        )


class TestConcurrentRequests:
    @pytest.mark.asyncio
    async def test_interleaved_requests_see_only_their_own_rows(self, seeded):
        async def request(tenant_id: str) -> set[str]:
            with tenant_context.bind(tenant_id):
                seen: set[str] = set()
                for _ in range(10):
                    await asyncio.sleep(0)
                    for product in await seeded.model("products").find_many():
                        seen.add(product["tenant_id"])
                return seen

        seen_a, seen_b = await asyncio.gather(request(TENANT_A), request(TENANT_B))

        assert seen_a == {TENANT_A}
        assert seen_b == {TENANT_B}
