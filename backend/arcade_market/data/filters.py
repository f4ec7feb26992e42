"""
PostgREST logical-filter grammar helpers.

Both backends accept ``or_`` expressions written as ``col.op.value`` terms
separated by commas, e.g. ``shop_number.eq.A1,email.eq."a@x.com"``. The
remote executor forwards the text as-is; the embedded executor parses it
with :func:`parse_or_expression`.
"""

from dataclasses import dataclass
from typing import Any, List, Sequence

from arcade_market.data.spec import QueryError, StorageError

OR_OPERATORS = ("eq", "neq", "gt", "gte", "lt", "lte", "like", "ilike", "is", "in")

# Characters that must be double-quoted inside a PostgREST filter value
RESERVED_CHARACTERS = set(',.:()" \\')


@dataclass(frozen=True)
class Condition:
    column: str
    operator: str
    value: Any


def format_value(value: Any) -> str:
    """Render a Python value the way PostgREST expects it in a URL."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def quote_value(value: Any) -> str:
    """Format ``value`` and double-quote it when it holds reserved characters."""
    text = format_value(value)
    if not any(char in RESERVED_CHARACTERS for char in text):
        return text
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def text_search(columns: Sequence[str], text: str) -> str:
    """Case-insensitive "contains ``text``" over any of ``columns``."""
    pattern = quote_value(f"*{text}*")
    return ",".join(f"{column}.ilike.{pattern}" for column in columns)


def split_top_level(text: str, separator: str = ",") -> List[str]:
    """Split on ``separator`` outside of double quotes and parentheses."""
    parts: List[str] = []
    current: List[str] = []
    depth = 0
    in_quotes = False
    escaped = False
    for char in text:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\" and in_quotes:
            current.append(char)
            escaped = True
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif not in_quotes and char == "(":
            depth += 1
        elif not in_quotes and char == ")":
            depth -= 1
        if char == separator and depth == 0 and not in_quotes:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    if in_quotes or depth != 0:
        raise _syntax_error(text, "unbalanced quotes or parentheses")
    parts.append("".join(current))
    return parts


def _unquote(value: str) -> str:
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        inner = value[1:-1]
        out = []
        escaped = False
        for char in inner:
            if escaped:
                out.append(char)
                escaped = False
            elif char == "\\":
                escaped = True
            else:
                out.append(char)
        return "".join(out)
    return value


def _syntax_error(expression: str, reason: str) -> StorageError:
    return StorageError(
        QueryError(
            message=f"failed to parse logic tree ({expression})",
            code="PGRST100",
            details=reason,
        )
    )


def _parse_value(operator: str, raw: str, expression: str) -> Any:
    if operator == "in":
        if not (raw.startswith("(") and raw.endswith(")")):
            raise _syntax_error(expression, "'in' expects a parenthesised list")
        inner = raw[1:-1]
        if not inner:
            return []
        return [_unquote(item.strip()) for item in split_top_level(inner)]
    if operator == "is":
        lowered = raw.lower()
        if lowered == "null":
            return None
        if lowered in ("true", "false"):
            return lowered == "true"
        raise _syntax_error(expression, "'is' accepts null, true or false")
    value = _unquote(raw)
    if operator in ("like", "ilike"):
        value = value.replace("*", "%")
    return value


def parse_or_expression(expression: str) -> List[Condition]:
    """Parse ``col.op.value,...`` into conditions. Raises ``StorageError``."""
    body = expression.strip()
    if body.startswith("(") and body.endswith(")"):
        body = body[1:-1]
    conditions = []
    for term in split_top_level(body):
        term = term.strip()
        pieces = term.split(".", 2)
        if len(pieces) != 3 or not pieces[0]:
            raise _syntax_error(expression, f"malformed term '{term}'")
        column, operator, raw = pieces
        if operator not in OR_OPERATORS:
            raise _syntax_error(expression, f"unsupported operator '{operator}'")
        conditions.append(Condition(column, operator, _parse_value(operator, raw, expression)))
    return conditions
