"""
Tests for the logical-filter grammar helpers
"""
import pytest

from arcade_market.data.filters import (
    Condition,
    parse_or_expression,
    quote_value,
    split_top_level,
    text_search,
)
from arcade_market.data.spec import StorageError


@pytest.mark.unit
class TestQuoting:
    def test_plain_values_are_left_alone(self):
        assert quote_value("A1") == "A1"
        assert quote_value(42) == "42"
        assert quote_value(None) == "null"
        assert quote_value(True) == "true"

    def test_reserved_characters_are_quoted(self):
        assert quote_value("a@x.com") == '"a@x.com"'
        assert quote_value("red, white") == '"red, white"'
        assert quote_value('say "hi"') == '"say \\"hi\\""'

    def test_text_search_covers_every_column(self):
        assert text_search(["name", "description"], "boot") == "name.ilike.*boot*,description.ilike.*boot*"

    def test_text_search_quotes_user_input(self):
        expression = text_search(["name"], "size 8, black")
        assert expression == 'name.ilike."*size 8, black*"'
        assert len(split_top_level(expression)) == 1


@pytest.mark.unit
class TestParsing:
    def test_parses_simple_disjunction(self):
        conditions = parse_or_expression('shop_number.eq.A1,email.eq."a@x.com"')
        assert conditions == [
            Condition("shop_number", "eq", "A1"),
            Condition("email", "eq", "a@x.com"),
        ]

    def test_outer_parentheses_are_optional(self):
        assert parse_or_expression("(status.eq.active)") == [Condition("status", "eq", "active")]

    def test_like_wildcards_become_sql_wildcards(self):
        [condition] = parse_or_expression('name.ilike."*size 8, black*"')
        assert condition.operator == "ilike"
        assert condition.value == "%size 8, black%"

    def test_in_lists_and_is_literals(self):
        conditions = parse_or_expression('id.in.(1,2,"x,y"),deleted_at.is.null,in_stock.is.true')
        assert conditions[0] == Condition("id", "in", ["1", "2", "x,y"])
        assert conditions[1] == Condition("deleted_at", "is", None)
        assert conditions[2] == Condition("in_stock", "is", True)

    @pytest.mark.parametrize(
        "expression",
        [
            "name",
            "name.eq",
            "name.between.1",
            'name.eq."unterminated',
            "id.in.1,2",
            "flag.is.maybe",
        ],
    )
    def test_malformed_expressions_raise_storage_error(self, expression):
        with pytest.raises(StorageError) as exc_info:
            parse_or_expression(expression)
        assert exc_info.value.error.code == "PGRST100"
