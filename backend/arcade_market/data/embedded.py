"""
Embedded executor: runs query specs as parameterized SQL on a local SQLite
file through SQLAlchemy Core.

Statements execute in the thread pool so request handlers only suspend,
never block the event loop. Driver errors are re-raised as ``StorageError``
with the original exception chained.

``ilike`` compiles to SQLite ``LIKE``, which folds case for ASCII letters
only: ``ilike("name", "écharpe")`` does not match "ÉCHARPE rouge" here,
while the remote backend's ILIKE does.
"""

import logging
from datetime import date, datetime
from typing import Any, List, Optional, Sequence

from sqlalchemy import Column, DateTime, MetaData, Table, delete, func, insert, or_, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from arcade_market.data.executor import Executor, Record
from arcade_market.data.filters import Condition, parse_or_expression
from arcade_market.data.spec import QueryError, QuerySpec, Result, StorageError

logger = logging.getLogger(__name__)


def _error_code(exc: SQLAlchemyError) -> str:
    """Map driver errors onto the PostgreSQL codes the hosted backend reports."""
    text = str(getattr(exc, "orig", None) or exc)
    if isinstance(exc, IntegrityError):
        if "UNIQUE" in text:
            return "23505"
        if "FOREIGN KEY" in text:
            return "23503"
        if "NOT NULL" in text:
            return "23502"
        return "23000"
    if "no such column" in text:
        return "42703"
    if "no such table" in text:
        return "42P01"
    return exc.__class__.__name__


def _serialize(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


class EmbeddedExecutor(Executor):
    """Executor backed by a single-file SQLite database."""

    name = "embedded"

    def __init__(self, engine: Engine, metadata: MetaData):
        self.engine = engine
        self.metadata = metadata

    async def initialize(self) -> None:
        logger.info(f"Creating embedded schema ({len(self.metadata.tables)} tables)")
        await run_in_threadpool(self.metadata.create_all, self.engine)

    async def close(self) -> None:
        await run_in_threadpool(self.engine.dispose)

    # --- public operations -------------------------------------------------

    async def query(self, spec: QuerySpec) -> Result:
        return await self._run(self._query, spec)

    async def insert(self, collection: str, records: List[Record], returning: Optional[str]) -> Result:
        return await self._run(self._insert, collection, records, returning)

    async def update(self, spec: QuerySpec, patch: Record, returning: Optional[str]) -> Result:
        return await self._run(self._update, spec, patch, returning)

    async def delete(self, spec: QuerySpec, returning: Optional[str]) -> Result:
        return await self._run(self._delete, spec, returning)

    async def replace(self, spec: QuerySpec, records: List[Record], returning: Optional[str]) -> Result:
        return await self._run(self._replace, spec, records, returning)

    async def _run(self, operation, *args) -> Result:
        try:
            return await run_in_threadpool(operation, *args)
        except SQLAlchemyError as exc:
            error = QueryError(
                message=str(getattr(exc, "orig", None) or exc),
                code=_error_code(exc),
            )
            raise StorageError(error) from exc

    # --- schema lookups ----------------------------------------------------

    def _table(self, name: str) -> Table:
        table = self.metadata.tables.get(name)
        if table is None:
            raise StorageError(
                QueryError(message=f'relation "{name}" does not exist', code="42P01")
            )
        return table

    def _column(self, table: Table, name: str) -> Column:
        if name not in table.c:
            raise StorageError(
                QueryError(
                    message=f"column {table.name}.{name} does not exist", code="42703"
                )
            )
        return table.c[name]

    def _columns(self, table: Table, columns: str) -> List[Column]:
        names = [name.strip() for name in columns.split(",") if name.strip()]
        if not names or names == ["*"]:
            return list(table.c)
        for name in names:
            if "(" in name or ":" in name:
                raise StorageError(
                    QueryError(
                        message=f"embedded resources are not supported: '{name}'",
                        code="PGRST100",
                    )
                )
        return [self._column(table, name) for name in names]

    def _primary_key(self, table: Table) -> Column:
        return list(table.primary_key.columns)[0]

    def _coerce(self, table: Table, record: Record) -> Record:
        """Validate column names and accept ISO strings for timestamp columns."""
        values = {}
        for key, value in record.items():
            column = self._column(table, key)
            if isinstance(value, str) and isinstance(column.type, DateTime):
                value = datetime.fromisoformat(value.replace("Z", "+00:00"))
            values[key] = value
        return values

    # --- WHERE clause ------------------------------------------------------

    def _predicate(self, column: Column, operator: str, value: Any):
        if operator == "eq":
            return column.is_(None) if value is None else column == value
        if operator == "neq":
            return column.isnot(None) if value is None else column != value
        if operator == "gt":
            return column > value
        if operator == "gte":
            return column >= value
        if operator == "lt":
            return column < value
        if operator == "lte":
            return column <= value
        if operator == "like":
            return column.like(value)
        if operator == "ilike":
            return column.ilike(value)
        if operator == "is":
            return column.is_(value)
        if operator == "in":
            return column.in_(list(value))
        raise StorageError(QueryError(message=f"unsupported operator '{operator}'", code="PGRST100"))

    def _condition(self, table: Table, condition: Condition):
        return self._predicate(self._column(table, condition.column), condition.operator, condition.value)

    def _where(self, table: Table, spec: QuerySpec) -> list:
        clauses = []
        for name, constraint in spec.filters:
            column = self._column(table, name)
            for operator, value in constraint.items():
                if operator == "ilike":
                    clauses.append(column.like(f"%{value}%"))
                else:
                    clauses.append(self._predicate(column, operator, value))
        if spec.or_filter is not None:
            conditions = parse_or_expression(spec.or_filter)
            clauses.append(or_(*[self._condition(table, condition) for condition in conditions]))
        return clauses

    def _row(self, row) -> Record:
        return {key: _serialize(value) for key, value in row._mapping.items()}

    def _project(self, record: Record, table: Table, columns: str) -> Record:
        selected = self._columns(table, columns)
        return {column.name: _serialize(record.get(column.name)) for column in selected if column.name in record}

    # --- statements --------------------------------------------------------

    def _query(self, spec: QuerySpec) -> Result:
        table = self._table(spec.collection)
        columns = self._columns(table, spec.columns)
        where = self._where(table, spec)

        stmt = select(*columns).where(*where)
        if spec.order is not None:
            order_column = self._column(table, spec.order.column)
            stmt = stmt.order_by(order_column.asc() if spec.order.ascending else order_column.desc())
        if spec.limit is not None:
            stmt = stmt.limit(spec.limit)

        count = None
        with self.engine.connect() as conn:
            if spec.count:
                count = conn.execute(
                    select(func.count()).select_from(table).where(*where)
                ).scalar_one()
            rows = [self._row(row) for row in conn.execute(stmt)]

        if spec.single:
            return Result(data=rows[0] if rows else None, count=count)
        return Result(data=rows, count=count)

    def _insert_rows(self, conn: Connection, table: Table, records: Sequence[Record]) -> List[Record]:
        created = []
        pk = self._primary_key(table)
        for record in records:
            values = self._coerce(table, record)
            result = conn.execute(insert(table).values(**values))
            # The driver does not round-trip the stored row; merge the new id
            created.append({pk.name: result.inserted_primary_key[0], **record})
        return created

    def _insert(self, collection: str, records: List[Record], returning: Optional[str]) -> Result:
        table = self._table(collection)
        with self.engine.begin() as conn:
            created = self._insert_rows(conn, table, records)
        if returning is None:
            return Result()
        return Result(data=[self._project(row, table, returning) for row in created])

    def _affected(self, conn: Connection, table: Table, where: list) -> List[Any]:
        pk = self._primary_key(table)
        return list(conn.execute(select(pk).where(*where)).scalars())

    def _fetch(self, conn: Connection, table: Table, ids: List[Any], columns: str) -> List[Record]:
        if not ids:
            return []
        pk = self._primary_key(table)
        stmt = select(*self._columns(table, columns)).where(pk.in_(ids)).order_by(pk)
        return [self._row(row) for row in conn.execute(stmt)]

    def _warn_unfiltered(self, action: str, spec: QuerySpec) -> None:
        if not spec.is_filtered:
            logger.warning(f"Unfiltered {action} on '{spec.collection}' affects every row")

    def _update(self, spec: QuerySpec, patch: Record, returning: Optional[str]) -> Result:
        table = self._table(spec.collection)
        where = self._where(table, spec)
        values = self._coerce(table, patch)
        self._warn_unfiltered("update", spec)

        with self.engine.begin() as conn:
            ids = self._affected(conn, table, where) if returning is not None else []
            if values:
                conn.execute(update(table).where(*where).values(**values))
            if returning is None:
                return Result()
            return Result(data=self._fetch(conn, table, ids, returning))

    def _delete(self, spec: QuerySpec, returning: Optional[str]) -> Result:
        table = self._table(spec.collection)
        where = self._where(table, spec)
        self._warn_unfiltered("delete", spec)

        with self.engine.begin() as conn:
            removed = []
            if returning is not None:
                removed = self._fetch(conn, table, self._affected(conn, table, where), returning)
            conn.execute(delete(table).where(*where))
        if returning is None:
            return Result()
        return Result(data=removed)

    def _replace(self, spec: QuerySpec, records: List[Record], returning: Optional[str]) -> Result:
        table = self._table(spec.collection)
        where = self._where(table, spec)
        self._warn_unfiltered("replace", spec)

        # Single transaction: a failed insert rolls the delete back
        with self.engine.begin() as conn:
            conn.execute(delete(table).where(*where))
            created = self._insert_rows(conn, table, records)
        if returning is None:
            return Result()
        return Result(data=[self._project(row, table, returning) for row in created])
