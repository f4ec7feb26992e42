"""
Fluent query builders.

Every builder is a frozen dataclass. Chained calls return new builders and
never mutate the receiver, and nothing touches storage until the builder is
awaited (or ``execute()`` is called). Awaiting always yields a
:class:`~arcade_market.data.spec.Result`; storage failures come back as
``Result(error=...)`` instead of raising.

    data, error = await (
        db.table("products")
        .select("id, name, price")
        .eq("category", "shoes")
        .gte("price", 100)
        .lte("price", 500)
        .order("created_at", ascending=False)
        .limit(20)
    )
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Optional, Union

from arcade_market.data.executor import Executor, Record
from arcade_market.data.spec import Order, QuerySpec, Result, StorageError

logger = logging.getLogger(__name__)


def _as_records(records: Union[Record, Iterable[Record]]) -> List[Record]:
    if isinstance(records, dict):
        return [dict(records)]
    return [dict(record) for record in records]


async def _run(operation, collection: str, *args) -> Result:
    try:
        return await operation(*args)
    except StorageError as exc:
        logger.warning(
            f"Query on '{collection}' failed: {exc.error.message} (code={exc.error.code})"
        )
        return Result(data=None, error=exc.error)


class _Filterable:
    """Filter methods shared by select, update, delete and replace builders."""

    spec: QuerySpec

    def eq(self, column: str, value: Any):
        return replace(self, spec=self.spec.constrain(column, eq=value))

    def neq(self, column: str, value: Any):
        return replace(self, spec=self.spec.constrain(column, neq=value))

    def gte(self, column: str, value: Any):
        return replace(self, spec=self.spec.constrain(column, gte=value))

    def lte(self, column: str, value: Any):
        return replace(self, spec=self.spec.constrain(column, lte=value))

    def ilike(self, column: str, value: str):
        """Case-insensitive "contains" match."""
        return replace(self, spec=self.spec.constrain(column, ilike=value))

    def in_(self, column: str, values: Iterable[Any]):
        return replace(self, spec=self.spec.constrain(column, in_=tuple(values)))

    def or_(self, expression: str):
        """Raw ``col.op.value,...`` disjunction; replaces any earlier one."""
        return replace(self, spec=replace(self.spec, or_filter=expression))

    def __await__(self):
        return self.execute().__await__()


@dataclass(frozen=True)
class SelectQuery(_Filterable):
    executor: Executor
    spec: QuerySpec

    def order(self, column: str, ascending: bool = True) -> "SelectQuery":
        return replace(self, spec=replace(self.spec, order=Order(column, ascending)))

    def limit(self, count: int) -> "SelectQuery":
        return replace(self, spec=replace(self.spec, limit=count))

    def single(self) -> "SelectQuery":
        """Expect at most one row: ``data`` becomes a row dict or ``None``."""
        return replace(self, spec=replace(self.spec, single=True))

    async def execute(self) -> Result:
        return await _run(self.executor.query, self.spec.collection, self.spec)


@dataclass(frozen=True)
class InsertQuery:
    executor: Executor
    collection: str
    records: List[Record]
    returning: Optional[str] = None
    one: bool = False

    def select(self, columns: str = "*") -> "InsertQuery":
        return replace(self, returning=columns)

    def single(self) -> "InsertQuery":
        return replace(self, one=True)

    async def execute(self) -> Result:
        result = await _run(
            self.executor.insert, self.collection, self.collection, self.records, self.returning
        )
        if self.one and result.ok and isinstance(result.data, list):
            return replace(result, data=result.data[0] if result.data else None)
        return result

    def __await__(self):
        return self.execute().__await__()


@dataclass(frozen=True)
class UpdateQuery(_Filterable):
    executor: Executor
    spec: QuerySpec
    patch: Record
    returning: Optional[str] = None

    def select(self, columns: str = "*") -> "UpdateQuery":
        return replace(self, returning=columns)

    async def execute(self) -> Result:
        return await _run(
            self.executor.update, self.spec.collection, self.spec, self.patch, self.returning
        )


@dataclass(frozen=True)
class DeleteQuery(_Filterable):
    executor: Executor
    spec: QuerySpec
    returning: Optional[str] = None

    def select(self, columns: str = "*") -> "DeleteQuery":
        return replace(self, returning=columns)

    async def execute(self) -> Result:
        return await _run(self.executor.delete, self.spec.collection, self.spec, self.returning)


@dataclass(frozen=True)
class ReplaceQuery(_Filterable):
    """Replace every row matching the filter with ``records``, atomically."""

    executor: Executor
    spec: QuerySpec
    records: List[Record]
    returning: Optional[str] = None

    def select(self, columns: str = "*") -> "ReplaceQuery":
        return replace(self, returning=columns)

    async def execute(self) -> Result:
        return await _run(
            self.executor.replace, self.spec.collection, self.spec, self.records, self.returning
        )


class Table:
    """Entry point for one collection: ``db.table("shops").select(...)``."""

    def __init__(self, executor: Executor, name: str):
        self.executor = executor
        self.name = name

    def select(self, columns: str = "*", count: Optional[str] = None) -> SelectQuery:
        return SelectQuery(self.executor, QuerySpec(self.name, columns=columns, count=count))

    def insert(self, records: Union[Record, Iterable[Record]]) -> InsertQuery:
        return InsertQuery(self.executor, self.name, _as_records(records))

    def update(self, patch: Dict[str, Any]) -> UpdateQuery:
        return UpdateQuery(self.executor, QuerySpec(self.name), dict(patch))

    def delete(self) -> DeleteQuery:
        return DeleteQuery(self.executor, QuerySpec(self.name))

    def replace(self, records: Union[Record, Iterable[Record]]) -> ReplaceQuery:
        return ReplaceQuery(self.executor, QuerySpec(self.name), _as_records(records))
