"""SQLite storage for grocery lists."""

from .lists import GroceryListDB
from .schema import ensure_schema

__all__ = [
    "GroceryListDB",
    "ensure_schema",
]
