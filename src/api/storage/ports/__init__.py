"""Ports for the storage context: the generic CRUD surface and its errors."""

from storage.ports.exceptions import (
    IsolationViolation,
    RecordNotFound,
    StorageError,
    UniqueConstraintViolation,
)
from storage.ports.operations import Action, RecordStore, StorageOperation

__all__ = [
    "Action",
    "IsolationViolation",
    "RecordNotFound",
    "RecordStore",
    "StorageError",
    "StorageOperation",
    "UniqueConstraintViolation",
]
