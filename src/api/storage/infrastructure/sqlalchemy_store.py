"""SQLAlchemy-backed RecordStore.

Operations are translated to Core statements against the ORM tables in
``Base.metadata`` and run on an AsyncSession. A standalone operation runs
in its own short transaction; inside ``transaction()`` every operation of
the current task shares one session and commits or rolls back together.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import Any

from sqlalchemy import (
    ColumnElement,
    MetaData,
    Table,
    and_,
    delete,
    false,
    func,
    insert,
    not_,
    or_,
    select,
    true,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from infrastructure.database.models import Base
from storage.domain.filters import InvalidFilterError, is_operator_clause
from storage.ports.exceptions import (
    RecordNotFound,
    StorageError,
    UniqueConstraintViolation,
)
from storage.ports.operations import StorageOperation

Record = dict[str, Any]


def compile_where(table: Table, where: Mapping[str, Any] | None) -> ColumnElement[bool]:
    """Translate a where filter into a SQL boolean expression.

    Raises:
        InvalidFilterError: If the filter names an unknown column or operator
    """
    if not where:
        return true()

    clauses: list[ColumnElement[bool]] = []
    for key, value in where.items():
        if key == "AND":
            parts = [compile_where(table, w) for w in _subfilters(key, value)]
            clauses.append(and_(true(), *parts))
        elif key == "OR":
            parts = [compile_where(table, w) for w in _subfilters(key, value)]
            clauses.append(or_(false(), *parts))
        elif key == "NOT":
            parts = [compile_where(table, w) for w in _subfilters(key, value)]
            clauses.append(not_(or_(false(), *parts)))
        else:
            clauses.append(_compile_field(table, key, value))
    return and_(true(), *clauses)


def _subfilters(key: str, value: Any) -> list[Mapping[str, Any]]:
    if isinstance(value, Mapping):
        return [value]
    if isinstance(value, list | tuple):
        return list(value)
    raise InvalidFilterError(f"'{key}' expects a filter or a list of filters")


def _column(table: Table, name: str):
    try:
        return table.c[name]
    except KeyError:
        raise InvalidFilterError(f"Unknown field '{name}' on '{table.name}'") from None


def _compile_field(table: Table, key: str, value: Any) -> ColumnElement[bool]:
    column = _column(table, key)
    if value is None:
        return column.is_(None)
    if not is_operator_clause(value):
        if isinstance(value, Mapping):
            raise InvalidFilterError(f"Unknown operator in clause for '{key}': {value}")
        return column == value

    clauses: list[ColumnElement[bool]] = []
    for operator, operand in value.items():
        if operator == "equals":
            clauses.append(column.is_(None) if operand is None else column == operand)
        elif operator == "not":
            clauses.append(
                column.is_not(None)
                if operand is None
                else or_(column != operand, column.is_(None))
            )
        elif operator == "in":
            clauses.append(column.in_(list(operand)))
        elif operator == "not_in":
            clauses.append(or_(column.not_in(list(operand)), column.is_(None)))
        elif operator == "contains":
            clauses.append(column.contains(str(operand), autoescape=True))
        elif operator == "lt":
            clauses.append(column < operand)
        elif operator == "lte":
            clauses.append(column <= operand)
        elif operator == "gt":
            clauses.append(column > operand)
        else:
            clauses.append(column >= operand)
    return and_(true(), *clauses)


class SqlAlchemyRecordStore:
    """RecordStore over an async SQLAlchemy session factory."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        metadata: MetaData = Base.metadata,
    ):
        self._session_factory = session_factory
        self._metadata = metadata
        self._session: ContextVar[AsyncSession | None] = ContextVar(
            f"sqlalchemy_store_session_{id(self)}", default=None
        )

    async def execute(self, operation: StorageOperation) -> Any:
        table = self._table(operation.model)
        session = self._session.get()
        if session is not None:
            return await self._run(session, table, operation)

        async with self._session_factory() as session:
            async with session.begin():
                return await self._run(session, table, operation)

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        if self._session.get() is not None:
            # Nested block joins the outer transaction
            yield
            return

        async with self._session_factory() as session:
            async with session.begin():
                token = self._session.set(session)
                try:
                    yield
                finally:
                    self._session.reset(token)

    def _table(self, model: str) -> Table:
        try:
            return self._metadata.tables[model]
        except KeyError:
            raise StorageError(f"Unknown record collection '{model}'") from None

    async def _run(
        self, session: AsyncSession, table: Table, operation: StorageOperation
    ) -> Any:
        handler = getattr(self, f"_{operation.action.value}")
        try:
            return await handler(session, table, operation.args)
        except IntegrityError as e:
            fields = self._violated_unique_key(table, e)
            if fields is not None:
                raise UniqueConstraintViolation(table.name, fields) from e
            raise

    @staticmethod
    def _violated_unique_key(table: Table, error: IntegrityError) -> tuple[str, ...] | None:
        message = str(error)
        unique_indexes = sorted(
            (index for index in table.indexes if index.unique and index.name),
            key=lambda index: len(index.name),
            reverse=True,
        )
        for index in unique_indexes:
            if index.name in message:
                return tuple(column.name for column in index.columns)
        return None

    # Reads

    def _select(self, table: Table, args: Mapping[str, Any]):
        stmt = select(table).where(compile_where(table, args.get("where")))
        for field, direction in (args.get("order_by") or {}).items():
            column = _column(table, field)
            stmt = stmt.order_by(
                column.desc() if direction.lower() == "desc" else column.asc()
            )
        if args.get("skip"):
            stmt = stmt.offset(args["skip"])
        if args.get("take") is not None:
            stmt = stmt.limit(args["take"])
        return stmt

    async def _find_many(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> list[Record]:
        result = await session.execute(self._select(table, args))
        return [dict(row) for row in result.mappings()]

    async def _find_first(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> Record | None:
        result = await session.execute(self._select(table, {**args, "take": 1}))
        row = result.mappings().first()
        return dict(row) if row is not None else None

    _find_unique = _find_first

    async def _count(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> int:
        stmt = (
            select(func.count())
            .select_from(table)
            .where(compile_where(table, args.get("where")))
        )
        return (await session.execute(stmt)).scalar_one()

    async def _aggregate(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> dict[str, Any]:
        labels, columns = self._aggregate_columns(table, args.get("aggregate") or {})
        if not columns:
            return {}
        stmt = select(*columns).select_from(table).where(
            compile_where(table, args.get("where"))
        )
        row = (await session.execute(stmt)).one()
        return _nest_aggregates(labels, row)

    async def _group_by(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        by = list(args.get("by") or [])
        if not by:
            raise ValueError("group_by requires at least one field in 'by'")
        group_columns = [_column(table, field) for field in by]
        labels, columns = self._aggregate_columns(
            table, args.get("aggregate") or {"count": True}
        )
        stmt = (
            select(*group_columns, *columns)
            .select_from(table)
            .where(compile_where(table, args.get("where")))
            .group_by(*group_columns)
        )
        rows = (await session.execute(stmt)).all()
        return [
            {**dict(zip(by, row[: len(by)])), **_nest_aggregates(labels, row[len(by) :])}
            for row in rows
        ]

    @staticmethod
    def _aggregate_columns(
        table: Table, aggregate: Mapping[str, Any]
    ) -> tuple[list[tuple[str, str | None]], list[Any]]:
        labels: list[tuple[str, str | None]] = []
        columns: list[Any] = []
        if aggregate.get("count"):
            labels.append(("count", None))
            columns.append(func.count())
        functions = {"sum": func.sum, "avg": func.avg, "min": func.min, "max": func.max}
        for operator, sql_function in functions.items():
            for field in aggregate.get(operator) or ():
                labels.append((operator, field))
                columns.append(sql_function(_column(table, field)))
        return labels, columns

    # Writes

    def _values(self, table: Table, data: Mapping[str, Any]) -> dict[str, Any]:
        unknown = set(data) - set(table.c.keys())
        if unknown:
            raise StorageError(f"Unknown fields for '{table.name}': {sorted(unknown)}")
        return dict(data)

    async def _create(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> Record:
        stmt = insert(table).values(**self._values(table, args["data"])).returning(table)
        return dict((await session.execute(stmt)).mappings().one())

    async def _create_many(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> int:
        rows = [self._values(table, item) for item in args["data"]]
        if not rows:
            return 0
        await session.execute(insert(table), rows)
        return len(rows)

    async def _first_id(
        self, session: AsyncSession, table: Table, where: Mapping[str, Any] | None
    ) -> Any:
        stmt = select(table.c.id).where(compile_where(table, where)).limit(1)
        return (await session.execute(stmt)).scalar_one_or_none()

    async def _update_by_id(
        self, session: AsyncSession, table: Table, record_id: Any, data: Mapping[str, Any]
    ) -> Record:
        stmt = (
            update(table)
            .where(table.c.id == record_id)
            .values(**self._values(table, data))
            .returning(table)
        )
        return dict((await session.execute(stmt)).mappings().one())

    async def _upsert(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> Record:
        record_id = await self._first_id(session, table, args.get("where"))
        if record_id is None:
            return await self._create(session, table, {"data": args["create"]})
        data = args.get("update") or {}
        if not data:
            return await self._find_first(session, table, {"where": {"id": record_id}})
        return await self._update_by_id(session, table, record_id, data)

    async def _update(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> Record:
        record_id = await self._first_id(session, table, args.get("where"))
        if record_id is None:
            raise RecordNotFound(table.name, args.get("where"))
        return await self._update_by_id(session, table, record_id, args["data"])

    async def _update_many(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> int:
        stmt = (
            update(table)
            .where(compile_where(table, args.get("where")))
            .values(**self._values(table, args["data"]))
        )
        return (await session.execute(stmt)).rowcount

    async def _delete(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> Record:
        record_id = await self._first_id(session, table, args.get("where"))
        if record_id is None:
            raise RecordNotFound(table.name, args.get("where"))
        stmt = delete(table).where(table.c.id == record_id).returning(table)
        return dict((await session.execute(stmt)).mappings().one())

    async def _delete_many(
        self, session: AsyncSession, table: Table, args: Mapping[str, Any]
    ) -> int:
        stmt = delete(table).where(compile_where(table, args.get("where")))
        return (await session.execute(stmt)).rowcount


def _nest_aggregates(labels: list[tuple[str, str | None]], values: Any) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for (operator, field), value in zip(labels, values):
        if field is None:
            result[operator] = value
        else:
            result.setdefault(operator, {})[field] = value
    return result

