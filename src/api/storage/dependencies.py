"""Record store wiring for FastAPI.

Every StorageClient handed out here wraps the configured backend in the
tenant-scoping interceptor; there is no unscoped client in the
application.
"""

from __future__ import annotations

from functools import lru_cache

from infrastructure.settings import get_settings
from storage.application import StorageClient, TenantScopedStore
from storage.ports.operations import RecordStore


def _create_backend() -> RecordStore:
    settings = get_settings()
    if settings.storage_backend == "memory":
        from storage.infrastructure.memory_store import InMemoryRecordStore

        return InMemoryRecordStore()

    from infrastructure.database.dependencies import get_session_factory
    from storage.infrastructure.sqlalchemy_store import SqlAlchemyRecordStore

    return SqlAlchemyRecordStore(get_session_factory())


@lru_cache
def get_record_store() -> TenantScopedStore:
    """Get the application-scoped, tenant-scoped record store (singleton)."""
    return TenantScopedStore(_create_backend())


def get_storage_client() -> StorageClient:
    """Get a StorageClient over the tenant-scoped record store."""
    return StorageClient(get_record_store())
