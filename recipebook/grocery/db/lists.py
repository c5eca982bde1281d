"""Grocery list and item storage."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from ..models import GroceryListItem
from .schema import ensure_schema

if TYPE_CHECKING:
    from ..commit import CommitResult
    from ..duplicates import DuplicateResolution
    from ..models import RecipeSelection

logger = logging.getLogger(__name__)


def _row_to_item(row: sqlite3.Row) -> GroceryListItem:
    return GroceryListItem(
        id=row["id"],
        name=row["name"],
        quantity=row["quantity"],
        unit=row["unit"],
        notes=row["notes"],
        is_completed=bool(row["is_completed"]),
        category=row["category"],
        order=row["item_order"],
    )


class GroceryListDB:
    """Manages grocery lists, their items and the recipes added to them."""

    def __init__(self, db_path: str | Path = "~/.config/recipebook/grocery.db") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = ensure_schema(self._db_path)
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def create_list(self, name: str, description: str | None = None) -> str:
        """Create a grocery list and return its ID."""
        conn = self._get_conn()
        list_id = str(uuid.uuid4())
        conn.execute(
            "INSERT INTO grocery_lists (id, name, description) VALUES (?, ?, ?)",
            (list_id, name, description),
        )
        conn.commit()
        return list_id

    def get_lists(self) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM grocery_lists ORDER BY updated_at DESC, name"
        ).fetchall()
        return [dict(r) for r in rows]

    def list_exists(self, list_id: str) -> bool:
        conn = self._get_conn()
        row = conn.execute(
            "SELECT 1 FROM grocery_lists WHERE id = ?", (list_id,)
        ).fetchone()
        return row is not None

    def get_items(self, list_id: str) -> list[GroceryListItem]:
        """Return the list's items ordered by position, then creation time."""
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM grocery_list_items
               WHERE grocery_list_id = ?
               ORDER BY item_order, created_at, rowid""",
            (list_id,),
        ).fetchall()
        return [_row_to_item(r) for r in rows]

    def add_item(self, list_id: str, item: GroceryListItem) -> None:
        conn = self._get_conn()
        self._insert_item(conn, list_id, item)
        conn.commit()

    def delete_item(self, item_id: str) -> None:
        """Delete an item by ID."""
        conn = self._get_conn()
        conn.execute("DELETE FROM grocery_list_items WHERE id = ?", (item_id,))
        conn.commit()

    def set_completed(self, item_id: str, completed: bool = True) -> None:
        conn = self._get_conn()
        conn.execute(
            """UPDATE grocery_list_items
               SET is_completed = ?,
                   completed_at = CASE WHEN ? THEN datetime('now', 'localtime') END
               WHERE id = ?""",
            (int(completed), int(completed), item_id),
        )
        conn.commit()

    def get_recipes(self, list_id: str) -> list[dict]:
        conn = self._get_conn()
        rows = conn.execute(
            """SELECT * FROM grocery_list_recipes
               WHERE grocery_list_id = ? ORDER BY added_at DESC, id DESC""",
            (list_id,),
        ).fetchall()
        return [dict(r) for r in rows]

    def apply_commit(
        self,
        list_id: str,
        result: CommitResult,
        selections: list[RecipeSelection] | None = None,
    ) -> None:
        """Write a commit's creates/updates (and the added recipes) in one transaction."""
        conn = self._get_conn()
        with conn:
            for selection in selections or []:
                conn.execute(
                    """INSERT INTO grocery_list_recipes
                       (grocery_list_id, recipe_id, variant_id, multiplier)
                       VALUES (?, ?, ?, ?)""",
                    (
                        list_id,
                        selection.recipe.id,
                        selection.variant_id,
                        selection.multiplier,
                    ),
                )
            for item in result.created:
                self._insert_item(conn, list_id, item)
            for item in result.updated:
                self._update_item(conn, item)
            self._touch(conn, list_id)
        logger.info(
            "List %s: %d items created, %d updated",
            list_id,
            len(result.created),
            len(result.updated),
        )

    def apply_duplicate_resolution(
        self, list_id: str, resolution: DuplicateResolution
    ) -> None:
        conn = self._get_conn()
        with conn:
            for item in resolution.updated:
                self._update_item(conn, item)
            for item_id in resolution.deleted_ids:
                conn.execute("DELETE FROM grocery_list_items WHERE id = ?", (item_id,))
            self._touch(conn, list_id)

    @staticmethod
    def _insert_item(conn: sqlite3.Connection, list_id: str, item: GroceryListItem) -> None:
        conn.execute(
            """INSERT INTO grocery_list_items
               (id, grocery_list_id, name, quantity, unit, notes,
                is_completed, category, item_order)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                item.id,
                list_id,
                item.name,
                item.quantity,
                item.unit,
                item.notes,
                int(item.is_completed),
                item.category,
                item.order,
            ),
        )

    @staticmethod
    def _update_item(conn: sqlite3.Connection, item: GroceryListItem) -> None:
        conn.execute(
            """UPDATE grocery_list_items
               SET name = ?, quantity = ?, unit = ?, notes = ?
               WHERE id = ?""",
            (item.name, item.quantity, item.unit, item.notes, item.id),
        )

    @staticmethod
    def _touch(conn: sqlite3.Connection, list_id: str) -> None:
        conn.execute(
            """UPDATE grocery_lists
               SET updated_at = datetime('now', 'localtime')
               WHERE id = ?""",
            (list_id,),
        )
