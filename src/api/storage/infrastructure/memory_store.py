"""In-memory RecordStore for development and tests.

Implements the full generic CRUD surface, including unique keys (the same
ones the database declares) and transactions. Each mutation is applied
synchronously inside ``execute``, so single operations are atomic under
asyncio. Transactions keep an undo journal in a ContextVar: a failing
block rolls back only the writes made by its own task, leaving concurrent
work untouched.
"""

from __future__ import annotations

import copy
from collections import defaultdict
from collections.abc import AsyncIterator, Callable, Mapping, Sequence
from contextlib import asynccontextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from ulid import ULID

from storage.domain.filters import matches
from storage.ports.exceptions import RecordNotFound, UniqueConstraintViolation
from storage.ports.operations import Action, StorageOperation

Record = dict[str, Any]
UniqueKeys = Mapping[str, Sequence[tuple[str, ...]]]


class InMemoryRecordStore:
    """Dict-backed implementation of the RecordStore protocol."""

    def __init__(self, unique_keys: UniqueKeys | None = None):
        if unique_keys is None:
            from storage.infrastructure.models import UNIQUE_KEYS

            unique_keys = UNIQUE_KEYS
        self._tables: dict[str, list[Record]] = defaultdict(list)
        self._unique_keys = {
            model: tuple(tuple(key) for key in keys)
            for model, keys in unique_keys.items()
        }
        self._journal: ContextVar[list[Callable[[], None]] | None] = ContextVar(
            f"memory_store_journal_{id(self)}", default=None
        )

    async def execute(self, operation: StorageOperation) -> Any:
        handler = self._handlers[operation.action]
        return handler(self, operation.model, operation.args)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._journal.get() is not None:
            # Nested block joins the outer transaction
            yield
            return

        journal: list[Callable[[], None]] = []
        token = self._journal.set(journal)
        try:
            yield
        except BaseException:
            for undo in reversed(journal):
                undo()
            raise
        finally:
            self._journal.reset(token)

    def rows(self, model: str) -> list[Record]:
        """Return copies of every stored row of a collection, unscoped."""
        return copy.deepcopy(self._tables[model])

    # Reads

    def _select(self, model: str, args: Mapping[str, Any]) -> list[Record]:
        rows = [row for row in self._tables[model] if matches(row, args.get("where"))]
        order_by = args.get("order_by")
        if order_by:
            for field, direction in reversed(list(order_by.items())):
                rows.sort(
                    key=lambda row, f=field: (row.get(f) is None, row.get(f)),
                    reverse=direction.lower() == "desc",
                )
        skip = args.get("skip") or 0
        take = args.get("take")
        rows = rows[skip:]
        if take is not None:
            rows = rows[:take]
        return rows

    def _find_many(self, model: str, args: Mapping[str, Any]) -> list[Record]:
        return copy.deepcopy(self._select(model, args))

    def _find_first(self, model: str, args: Mapping[str, Any]) -> Record | None:
        rows = self._select(model, {**args, "take": 1})
        return copy.deepcopy(rows[0]) if rows else None

    def _count(self, model: str, args: Mapping[str, Any]) -> int:
        return len(self._select(model, {"where": args.get("where")}))

    def _aggregate(self, model: str, args: Mapping[str, Any]) -> dict[str, Any]:
        rows = self._select(model, {"where": args.get("where")})
        return _aggregate_rows(rows, args.get("aggregate") or {})

    def _group_by(self, model: str, args: Mapping[str, Any]) -> list[dict[str, Any]]:
        by = list(args.get("by") or [])
        if not by:
            raise ValueError("group_by requires at least one field in 'by'")
        groups: dict[tuple[Any, ...], list[Record]] = {}
        for row in self._select(model, {"where": args.get("where")}):
            groups.setdefault(tuple(row.get(field) for field in by), []).append(row)
        aggregate = args.get("aggregate") or {"count": True}
        return [
            {**dict(zip(by, key)), **_aggregate_rows(rows, aggregate)}
            for key, rows in groups.items()
        ]

    # Writes

    def _create(self, model: str, args: Mapping[str, Any]) -> Record:
        return copy.deepcopy(self._insert(model, args["data"]))

    def _create_many(self, model: str, args: Mapping[str, Any]) -> int:
        inserted: list[Record] = []
        try:
            for item in args["data"]:
                inserted.append(self._insert(model, item))
        except UniqueConstraintViolation:
            for row in inserted:
                self._remove(model, row)
            raise
        return len(inserted)

    def _upsert(self, model: str, args: Mapping[str, Any]) -> Record:
        rows = self._select(model, {"where": args.get("where"), "take": 1})
        if rows:
            return copy.deepcopy(self._apply_update(model, rows[0], args.get("update") or {}))
        return copy.deepcopy(self._insert(model, args["create"]))

    def _update(self, model: str, args: Mapping[str, Any]) -> Record:
        rows = self._select(model, {"where": args.get("where"), "take": 1})
        if not rows:
            raise RecordNotFound(model, args.get("where"))
        return copy.deepcopy(self._apply_update(model, rows[0], args["data"]))

    def _update_many(self, model: str, args: Mapping[str, Any]) -> int:
        rows = self._select(model, {"where": args.get("where")})
        for row in rows:
            self._apply_update(model, row, args["data"])
        return len(rows)

    def _delete(self, model: str, args: Mapping[str, Any]) -> Record:
        rows = self._select(model, {"where": args.get("where"), "take": 1})
        if not rows:
            raise RecordNotFound(model, args.get("where"))
        self._remove(model, rows[0])
        return copy.deepcopy(rows[0])

    def _delete_many(self, model: str, args: Mapping[str, Any]) -> int:
        rows = self._select(model, {"where": args.get("where")})
        for row in rows:
            self._remove(model, row)
        return len(rows)

    def _insert(self, model: str, data: Mapping[str, Any]) -> Record:
        now = datetime.now(UTC)
        row: Record = copy.deepcopy(dict(data))
        row.setdefault("id", str(ULID()))
        row.setdefault("created_at", now)
        row.setdefault("updated_at", now)
        self._check_unique(model, row, exclude=None)

        table = self._tables[model]
        table.append(row)
        self._record_undo(lambda: self._discard(table, row))
        return row

    def _apply_update(
        self, model: str, row: Record, data: Mapping[str, Any]
    ) -> Record:
        updated = {**row, **copy.deepcopy(dict(data)), "updated_at": datetime.now(UTC)}
        self._check_unique(model, updated, exclude=row)

        previous = dict(row)
        row.clear()
        row.update(updated)

        def undo() -> None:
            row.clear()
            row.update(previous)

        self._record_undo(undo)
        return row

    def _remove(self, model: str, row: Record) -> None:
        table = self._tables[model]
        self._discard(table, row)
        self._record_undo(lambda: table.append(row))

    @staticmethod
    def _discard(table: list[Record], row: Record) -> None:
        for index, candidate in enumerate(table):
            if candidate is row:
                del table[index]
                return

    def _record_undo(self, undo: Callable[[], None]) -> None:
        journal = self._journal.get()
        if journal is not None:
            journal.append(undo)

    def _check_unique(
        self, model: str, row: Mapping[str, Any], exclude: Record | None
    ) -> None:
        for fields in self._unique_keys.get(model, ()):
            values = tuple(row.get(field) for field in fields)
            if any(value is None for value in values):
                continue
            for other in self._tables[model]:
                if other is exclude:
                    continue
                if tuple(other.get(field) for field in fields) == values:
                    raise UniqueConstraintViolation(model, fields)

    _handlers: dict[Action, Callable[..., Any]] = {
        Action.FIND_MANY: _find_many,
        Action.FIND_FIRST: _find_first,
        Action.FIND_UNIQUE: _find_first,
        Action.COUNT: _count,
        Action.AGGREGATE: _aggregate,
        Action.GROUP_BY: _group_by,
        Action.CREATE: _create,
        Action.CREATE_MANY: _create_many,
        Action.UPSERT: _upsert,
        Action.UPDATE: _update,
        Action.UPDATE_MANY: _update_many,
        Action.DELETE: _delete,
        Action.DELETE_MANY: _delete_many,
    }


def _aggregate_rows(rows: list[Record], aggregate: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    if aggregate.get("count"):
        result["count"] = len(rows)
    for operator in ("sum", "avg", "min", "max"):
        fields = aggregate.get(operator)
        if not fields:
            continue
        result[operator] = {}
        for field in fields:
            values = [row[field] for row in rows if row.get(field) is not None]
            if operator == "sum":
                result[operator][field] = sum(values) if values else None
            elif operator == "avg":
                result[operator][field] = sum(values) / len(values) if values else None
            elif operator == "min":
                result[operator][field] = min(values) if values else None
            else:
                result[operator][field] = max(values) if values else None
    return result
