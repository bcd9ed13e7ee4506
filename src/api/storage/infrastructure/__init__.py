"""Record store implementations and ORM tables."""

from storage.infrastructure.memory_store import InMemoryRecordStore
from storage.infrastructure.sqlalchemy_store import SqlAlchemyRecordStore, compile_where

__all__ = [
    "InMemoryRecordStore",
    "SqlAlchemyRecordStore",
    "compile_where",
]
