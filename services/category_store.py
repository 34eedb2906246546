"""Category store for database operations on the categories table."""

from dataclasses import replace
from datetime import datetime
from typing import List, Optional
from models.base import utcnow
from models.category import Category

_CATEGORY_SELECT_FIELDS = "id, name, description, parent_id, created_at, updated_at"


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_category(row) -> Category:
    return Category(
        id=row[0],
        name=row[1],
        description=row[2],
        parent_id=row[3],
        created_at=datetime.fromisoformat(row[4]) if row[4] else None,
        updated_at=datetime.fromisoformat(row[5]) if row[5] else None,
    )


class CategoryStore:
    """Persistent collection of category nodes.

    Lookups on missing IDs return None, False or an empty list; they never raise.
    """

    def __init__(self, db_manager):
        """Initialize the category store.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def _query(self, where: str = "", params: tuple = ()) -> List[Category]:
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories {where} ORDER BY name, id",
                params,
            )
            return [_row_to_category(row) for row in cursor.fetchall()]

    def get_by_id(self, category_id: int) -> Optional[Category]:
        """Get a single category by ID.

        Args:
            category_id: The category ID to find.

        Returns:
            Category object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                f"SELECT {_CATEGORY_SELECT_FIELDS} FROM categories WHERE id = ?",
                (category_id,),
            )
            row = cursor.fetchone()

            if row:
                return _row_to_category(row)
            return None

    def get_all(self) -> List[Category]:
        """Get all categories, ordered by name."""
        return self._query()

    def get_root_nodes(self) -> List[Category]:
        """Get categories that have no parent."""
        return self._query("WHERE parent_id IS NULL")

    def get_children(self, parent_id: int) -> List[Category]:
        """Get the direct children of a category.

        Args:
            parent_id: ID of the parent category.

        Returns:
            List of child categories, empty if there are none or the parent is missing.
        """
        return self._query("WHERE parent_id = ?", (parent_id,))

    def search_by_name(self, term: str) -> List[Category]:
        """Find categories whose name or description contains a term.

        Matching is case-insensitive substring matching using Unicode case
        folding on both sides (the connection provides ``casefold()``). LIKE
        wildcards in the term are matched literally.

        Args:
            term: Text to search for.

        Returns:
            List of matching categories, ordered by name.
        """
        pattern = f"%{_escape_like(term.casefold())}%"
        return self._query(
            "WHERE casefold(name) LIKE ? ESCAPE '\\' "
            "OR casefold(coalesce(description, '')) LIKE ? ESCAPE '\\'",
            (pattern, pattern),
        )

    def add(self, category: Category) -> Category:
        """Persist a new category.

        Args:
            category: Category to insert. Its id is ignored.

        Returns:
            A copy of the category with id and timestamps populated.
        """
        created_at = category.created_at or utcnow()
        updated_at = category.updated_at or created_at

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO categories (name, description, parent_id, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    category.name,
                    category.description,
                    category.parent_id,
                    created_at.isoformat(),
                    updated_at.isoformat(),
                ),
            )
            conn.commit()

            return replace(
                category,
                id=cursor.lastrowid,
                created_at=created_at,
                updated_at=updated_at,
                subcategories=[],
            )

    def update(self, category: Category) -> bool:
        """Overwrite a stored category by ID.

        The caller is responsible for setting updated_at.

        Args:
            category: Category carrying the new field values.

        Returns:
            True if a row was updated, False if no category has that ID.
        """
        updated_at = category.updated_at or utcnow()

        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                UPDATE categories
                SET name = ?, description = ?, parent_id = ?, updated_at = ?
                WHERE id = ?
                """,
                (
                    category.name,
                    category.description,
                    category.parent_id,
                    updated_at.isoformat(),
                    category.id,
                ),
            )
            conn.commit()
            return cursor.rowcount > 0

    def delete(self, category: Category) -> bool:
        """Remove a category by ID.

        Returns:
            True if the category was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute("DELETE FROM categories WHERE id = ?", (category.id,))
            conn.commit()
            return cursor.rowcount > 0

    def exists(self, category_id: int) -> bool:
        """Check whether a category with this ID exists."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT 1 FROM categories WHERE id = ?", (category_id,)
            )
            return cursor.fetchone() is not None
