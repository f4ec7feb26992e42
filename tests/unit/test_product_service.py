"""
Tests for product listing helpers
"""
import pytest

from arcade_market.schemas import SizeIn
from arcade_market.services.product_service import format_sizes, size_records


@pytest.mark.unit
class TestSizes:
    def test_format_with_quantity(self):
        sizes = [
            {"size": "8", "in_stock": True, "quantity": 3},
            {"size": "9", "in_stock": False, "quantity": None},
        ]
        assert format_sizes(sizes) == "8:1:3,9:0:0"

    def test_format_without_quantity(self):
        sizes = [{"size": "8", "in_stock": True, "quantity": 3}]
        assert format_sizes(sizes, with_quantity=False) == "8:1"

    def test_no_sizes(self):
        assert format_sizes([]) == ""

    def test_size_records_fill_defaults(self):
        records = size_records(5, [SizeIn(size="8"), SizeIn(size="9", in_stock=False, quantity=2)])
        assert records == [
            {"product_id": 5, "size": "8", "in_stock": True, "quantity": 0},
            {"product_id": 5, "size": "9", "in_stock": False, "quantity": 2},
        ]
