"""Model-oriented facade over a RecordStore.

Application code talks to collections by name instead of building
StorageOperations by hand:

    client = StorageClient(store)
    product = await client.model("products").find_unique(where={"id": pid})

When ``store`` is a TenantScopedStore every call made through the
facade is tenant-scoped.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any

from storage.ports.operations import Action, RecordStore, StorageOperation

Where = dict[str, Any]
Record = dict[str, Any]


class ModelClient:
    """CRUD calls for one record collection."""

    def __init__(self, store: RecordStore, model: str):
        self._store = store
        self._model = model

    @property
    def name(self) -> str:
        return self._model

    async def _run(self, action: Action, **args: Any) -> Any:
        clean = {key: value for key, value in args.items() if value is not None}
        return await self._store.execute(
            StorageOperation(model=self._model, action=action, args=clean)
        )

    async def find_many(
        self,
        where: Where | None = None,
        order_by: dict[str, str] | None = None,
        skip: int | None = None,
        take: int | None = None,
    ) -> list[Record]:
        return await self._run(
            Action.FIND_MANY, where=where, order_by=order_by, skip=skip, take=take
        )

    async def find_first(
        self,
        where: Where | None = None,
        order_by: dict[str, str] | None = None,
    ) -> Record | None:
        return await self._run(Action.FIND_FIRST, where=where, order_by=order_by)

    async def find_unique(self, where: Where) -> Record | None:
        return await self._run(Action.FIND_UNIQUE, where=where)

    async def count(self, where: Where | None = None) -> int:
        return await self._run(Action.COUNT, where=where)

    async def aggregate(
        self, aggregate: dict[str, Any], where: Where | None = None
    ) -> dict[str, Any]:
        return await self._run(Action.AGGREGATE, where=where, aggregate=aggregate)

    async def group_by(
        self,
        by: list[str],
        where: Where | None = None,
        aggregate: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        return await self._run(Action.GROUP_BY, by=by, where=where, aggregate=aggregate)

    async def create(self, data: Record) -> Record:
        return await self._run(Action.CREATE, data=data)

    async def create_many(self, data: list[Record]) -> int:
        return await self._run(Action.CREATE_MANY, data=data)

    async def upsert(self, where: Where, create: Record, update: Record) -> Record:
        return await self._run(Action.UPSERT, where=where, create=create, update=update)

    async def update(self, where: Where, data: Record) -> Record:
        return await self._run(Action.UPDATE, where=where, data=data)

    async def update_many(self, where: Where | None, data: Record) -> int:
        return await self._run(Action.UPDATE_MANY, where=where, data=data)

    async def delete(self, where: Where) -> Record:
        return await self._run(Action.DELETE, where=where)

    async def delete_many(self, where: Where | None = None) -> int:
        return await self._run(Action.DELETE_MANY, where=where)


class StorageClient:
    """Entry point handing out ModelClients that share one store."""

    def __init__(self, store: RecordStore):
        self._store = store

    @property
    def store(self) -> RecordStore:
        return self._store

    def model(self, name: str) -> ModelClient:
        return ModelClient(self._store, name)

    def transaction(self) -> AbstractAsyncContextManager[None]:
        return self._store.transaction()
