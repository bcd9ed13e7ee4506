"""Storage application layer: the tenant-scoping interceptor and client facade."""

from storage.application.client import ModelClient, StorageClient
from storage.application.tenant_scoped_store import TenantScopedStore

__all__ = [
    "ModelClient",
    "StorageClient",
    "TenantScopedStore",
]
