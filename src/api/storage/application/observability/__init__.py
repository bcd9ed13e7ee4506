"""Domain-Oriented Observability for the storage application layer."""

from storage.application.observability.scoping_probe import (
    DefaultScopingProbe,
    ScopingProbe,
)

__all__ = [
    "DefaultScopingProbe",
    "ScopingProbe",
]
