"""
Backend-agnostic query description and the result envelope.

A ``QuerySpec`` is an immutable value: every refinement returns a new spec,
so two builders derived from the same parent never observe each other's
filters.
"""

from dataclasses import dataclass, replace
from typing import Any, Iterator, Optional, Tuple


class _Unset:
    """Marker for constraint slots that were never set."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()

# Emission order of per-column predicates (and of their bound parameters)
CONSTRAINT_OPERATORS = ("eq", "neq", "gte", "lte", "ilike", "in")


@dataclass(frozen=True)
class QueryError:
    """Error half of the result envelope. Shaped like a PostgREST error body."""

    message: str
    code: Optional[str] = None
    details: Optional[str] = None
    hint: Optional[str] = None


class StorageError(Exception):
    """Raised by executors when a statement fails at the storage layer."""

    def __init__(self, error: QueryError):
        super().__init__(error.message)
        self.error = error


@dataclass(frozen=True)
class Result:
    """
    The ``{data, error}`` envelope returned by every data-access operation.

    ``data`` is ``None`` whenever ``error`` is set. ``count`` is only filled
    when the query asked for an exact row count.
    """

    data: Any = None
    error: Optional[QueryError] = None
    count: Optional[int] = None

    def __iter__(self) -> Iterator[Any]:
        yield self.data
        yield self.error

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class Constraint:
    """All predicates applied to a single column; unset slots are ignored."""

    eq: Any = UNSET
    neq: Any = UNSET
    gte: Any = UNSET
    lte: Any = UNSET
    ilike: Any = UNSET
    in_: Any = UNSET

    def items(self) -> Iterator[Tuple[str, Any]]:
        for operator in CONSTRAINT_OPERATORS:
            value = getattr(self, "in_" if operator == "in" else operator)
            if value is not UNSET:
                yield operator, value


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True


@dataclass(frozen=True)
class QuerySpec:
    """Accumulated description of one query against one collection."""

    collection: str
    columns: str = "*"
    filters: Tuple[Tuple[str, Constraint], ...] = ()
    or_filter: Optional[str] = None
    order: Optional[Order] = None
    limit: Optional[int] = None
    single: bool = False
    count: Optional[str] = None

    def constraint_for(self, column: str) -> Constraint:
        for name, constraint in self.filters:
            if name == column:
                return constraint
        return Constraint()

    def constrain(self, column: str, **changes: Any) -> "QuerySpec":
        """Return a new spec with ``changes`` merged into ``column``'s constraint."""
        merged = replace(self.constraint_for(column), **changes)
        filters = []
        found = False
        for name, constraint in self.filters:
            if name == column:
                filters.append((name, merged))
                found = True
            else:
                filters.append((name, constraint))
        if not found:
            filters.append((column, merged))
        return replace(self, filters=tuple(filters))

    @property
    def is_filtered(self) -> bool:
        return bool(self.filters) or self.or_filter is not None
