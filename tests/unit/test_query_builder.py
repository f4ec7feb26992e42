"""
Tests for the fluent query builders (no storage involved)
"""
from typing import List, Optional

import pytest

from arcade_market.data.client import Database
from arcade_market.data.executor import Executor, Record
from arcade_market.data.spec import QueryError, QuerySpec, Result, StorageError


class RecordingExecutor(Executor):
    """Remembers every call; optionally fails with a storage error."""

    name = "recording"

    def __init__(self, fail_with: Optional[QueryError] = None):
        self.calls: List[tuple] = []
        self.fail_with = fail_with

    def _answer(self, call: tuple) -> Result:
        self.calls.append(call)
        if self.fail_with is not None:
            raise StorageError(self.fail_with)
        return Result(data=[])

    async def query(self, spec: QuerySpec) -> Result:
        return self._answer(("query", spec))

    async def insert(self, collection: str, records: List[Record], returning: Optional[str]) -> Result:
        self.calls.append(("insert", collection, records, returning))
        if self.fail_with is not None:
            raise StorageError(self.fail_with)
        rows = [{"id": index + 1, **record} for index, record in enumerate(records)]
        return Result(data=rows if returning is not None else None)

    async def update(self, spec: QuerySpec, patch: Record, returning: Optional[str]) -> Result:
        return self._answer(("update", spec, patch, returning))

    async def delete(self, spec: QuerySpec, returning: Optional[str]) -> Result:
        return self._answer(("delete", spec, returning))

    async def replace(self, spec: QuerySpec, records: List[Record], returning: Optional[str]) -> Result:
        return self._answer(("replace", spec, records, returning))


@pytest.fixture
def executor():
    return RecordingExecutor()


@pytest.fixture
def db(executor):
    return Database(executor)


@pytest.mark.unit
class TestBuilderComposition:
    def test_chained_calls_do_not_mutate_the_receiver(self, db):
        base = db.table("products").select("id, name")
        shoes = base.eq("category", "shoes")
        cheap = base.lte("price", 100)

        assert base.spec.filters == ()
        assert [name for name, _ in shoes.spec.filters] == ["category"]
        assert [name for name, _ in cheap.spec.filters] == ["price"]

    def test_range_on_one_column_merges_into_one_constraint(self, db):
        query = db.table("products").select().gte("price", 100).eq("category", "shoes").lte("price", 500)

        constraint = query.spec.constraint_for("price")
        assert constraint.gte == 100
        assert constraint.lte == 500
        assert [name for name, _ in query.spec.filters] == ["price", "category"]
        assert list(constraint.items()) == [("gte", 100), ("lte", 500)]

    def test_repeated_equality_on_a_column_overwrites(self, db):
        query = db.table("shops").select().eq("status", "pending").eq("status", "active")
        assert list(query.spec.constraint_for("status").items()) == [("eq", "active")]

    def test_later_order_and_or_replace_earlier_ones(self, db):
        query = (
            db.table("products")
            .select()
            .order("price")
            .order("created_at", ascending=False)
            .or_("name.eq.a")
            .or_("name.eq.b")
        )
        assert query.spec.order.column == "created_at"
        assert query.spec.order.ascending is False
        assert query.spec.or_filter == "name.eq.b"

    def test_in_filter_is_stored_as_tuple(self, db):
        ids = [3, 1, 2]
        query = db.table("products").select().in_("id", ids)
        ids.append(4)
        assert query.spec.constraint_for("id").in_ == (3, 1, 2)

    def test_limit_single_and_count_options(self, db):
        query = db.table("shops").select("id", count="exact").limit(5).single()
        assert query.spec.limit == 5
        assert query.spec.single is True
        assert query.spec.count == "exact"
        assert query.spec.columns == "id"

    def test_unfiltered_spec_is_detected(self, db):
        assert not db.table("orders").delete().spec.is_filtered
        assert db.table("orders").delete().eq("id", 1).spec.is_filtered
        assert db.table("orders").delete().or_("id.eq.1").spec.is_filtered

    def test_from_is_an_alias_for_table(self, db):
        assert db.from_("shops").name == "shops"


@pytest.mark.unit
@pytest.mark.asyncio
class TestBuilderExecution:
    async def test_nothing_runs_until_awaited(self, db, executor):
        query = db.table("shops").select().eq("status", "active")
        assert executor.calls == []

        data, error = await query
        assert data == []
        assert error is None
        assert len(executor.calls) == 1

    async def test_storage_error_becomes_error_envelope(self):
        failing = RecordingExecutor(fail_with=QueryError(message="boom", code="42703"))
        db = Database(failing)

        result = await db.table("shops").select().eq("nope", 1)

        assert result.data is None
        assert result.error.code == "42703"
        assert not result.ok

    async def test_insert_single_returns_first_row(self, db, executor):
        data, error = await db.table("shops").insert({"shop_number": "A1"}).select("id").single()
        assert error is None
        assert data == {"id": 1, "shop_number": "A1"}
        assert executor.calls[0] == ("insert", "shops", [{"shop_number": "A1"}], "id")

    async def test_insert_without_select_returns_no_rows(self, db):
        data, error = await db.table("shops").insert([{"shop_number": "A1"}, {"shop_number": "B2"}])
        assert data is None
        assert error is None

    async def test_update_delete_and_replace_carry_their_filters(self, db, executor):
        await db.table("orders").update({"status": "confirmed"}).eq("id", 7).eq("shop_id", 2).select("id")
        await db.table("products").delete().eq("id", 3)
        await db.table("product_sizes").replace([{"product_id": 3, "size": "8"}]).eq("product_id", 3)

        update_call, delete_call, replace_call = executor.calls
        assert update_call[0] == "update"
        assert [name for name, _ in update_call[1].filters] == ["id", "shop_id"]
        assert update_call[2] == {"status": "confirmed"}
        assert update_call[3] == "id"
        assert delete_call[2] is None
        assert replace_call[2] == [{"product_id": 3, "size": "8"}]
