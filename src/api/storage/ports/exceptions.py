"""Exceptions raised by record stores and the tenant-scoping interceptor."""

from __future__ import annotations

from shared_kernel.middleware.tenant_context import IsolationViolation

__all__ = [
    "IsolationViolation",
    "RecordNotFound",
    "StorageError",
    "UniqueConstraintViolation",
]


class StorageError(Exception):
    """Base exception for record store operations."""

    pass


class RecordNotFound(StorageError):
    """Raised when a single-record update/delete matches nothing.

    Under tenant scoping this is the expected outcome for a key that
    belongs to another tenant: the row is outside the caller's scope and
    therefore does not exist for them.
    """

    def __init__(self, model: str, where: dict | None = None):
        super().__init__(f"No '{model}' record matches the given criteria")
        self.model = model
        self.where = where


class UniqueConstraintViolation(StorageError):
    """Raised when a write would duplicate a unique key.

    Attributes:
        model: Record collection name
        fields: The fields making up the violated unique key
    """

    def __init__(self, model: str, fields: tuple[str, ...]):
        super().__init__(
            f"Unique constraint on '{model}' ({', '.join(fields)}) violated"
        )
        self.model = model
        self.fields = fields
