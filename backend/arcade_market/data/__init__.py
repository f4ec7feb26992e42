"""
Data-access layer: fluent query builders over an embedded or a hosted backend.
"""

from arcade_market.data.client import Database, create_database
from arcade_market.data.filters import quote_value, text_search
from arcade_market.data.spec import QueryError, Result, StorageError

__all__ = [
    "Database",
    "create_database",
    "quote_value",
    "text_search",
    "QueryError",
    "Result",
    "StorageError",
]
