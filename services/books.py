"""Book service for database operations and book-category links."""

from datetime import datetime
from typing import List, Optional
from models.book import Book
from models.base import utcnow
from services.errors import BookNotFoundError, CategoryNotFoundError


def _row_to_book(row) -> Book:
    return Book(
        id=row[0],
        title=row[1],
        isbn=row[2],
        created_at=datetime.fromisoformat(row[3]) if row[3] else None,
    )


class BookService:
    """Service for managing books and their category associations."""

    def __init__(self, db_manager):
        """Initialize the book service.

        Args:
            db_manager: Database manager instance for database operations.
        """
        self.db_manager = db_manager

    def find_all(self) -> List[Book]:
        """Get all books, ordered by id."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT id, title, isbn, created_at FROM books ORDER BY id"
            )
            return [_row_to_book(row) for row in cursor.fetchall()]

    def find(self, book_id: int) -> Optional[Book]:
        """Get a single book by ID.

        Args:
            book_id: The book ID to find.

        Returns:
            Book object if found, None otherwise.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT id, title, isbn, created_at FROM books WHERE id = ?",
                (book_id,),
            )
            row = cursor.fetchone()
            return _row_to_book(row) if row else None

    def create(self, title: str, isbn: Optional[str] = None) -> Book:
        """Create a new book.

        Args:
            title: Book title.
            isbn: Optional ISBN.

        Returns:
            The created Book object with id populated.
        """
        created_at = utcnow()
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "INSERT INTO books (title, isbn, created_at) VALUES (?, ?, ?)",
                (title, isbn, created_at.isoformat()),
            )
            conn.commit()
            return Book(
                id=cursor.lastrowid, title=title, isbn=isbn, created_at=created_at
            )

    def delete(self, book_id: int) -> bool:
        """Delete a book and its category links.

        Returns:
            True if book was deleted, False if not found.
        """
        with self.db_manager.connect() as conn:
            conn.execute("DELETE FROM book_categories WHERE book_id = ?", (book_id,))
            cursor = conn.execute("DELETE FROM books WHERE id = ?", (book_id,))
            conn.commit()
            return cursor.rowcount > 0

    def link_category(self, book_id: int, category_id: int) -> None:
        """Associate a book with a category. Linking twice is a no-op.

        Raises:
            BookNotFoundError: If the book does not exist.
            CategoryNotFoundError: If the category does not exist.
        """
        with self.db_manager.connect() as conn:
            if not conn.execute("SELECT 1 FROM books WHERE id = ?", (book_id,)).fetchone():
                raise BookNotFoundError(book_id)
            if not conn.execute(
                "SELECT 1 FROM categories WHERE id = ?", (category_id,)
            ).fetchone():
                raise CategoryNotFoundError(category_id)

            conn.execute(
                """
                INSERT OR IGNORE INTO book_categories (book_id, category_id, created_at)
                VALUES (?, ?, ?)
                """,
                (book_id, category_id, utcnow().isoformat()),
            )
            conn.commit()

    def unlink_category(self, book_id: int, category_id: int) -> bool:
        """Remove a book-category association.

        Returns:
            True if a link was removed, False if none existed.
        """
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "DELETE FROM book_categories WHERE book_id = ? AND category_id = ?",
                (book_id, category_id),
            )
            conn.commit()
            return cursor.rowcount > 0

    def find_by_category(self, category_id: int) -> List[Book]:
        """Get the books linked to a category, ordered by title."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                """
                SELECT b.id, b.title, b.isbn, b.created_at
                FROM books b
                JOIN book_categories bc ON bc.book_id = b.id
                WHERE bc.category_id = ?
                ORDER BY b.title, b.id
                """,
                (category_id,),
            )
            return [_row_to_book(row) for row in cursor.fetchall()]

    def category_has_books(self, category_id: int) -> bool:
        """Check whether any book is linked to a category."""
        with self.db_manager.connect() as conn:
            cursor = conn.execute(
                "SELECT 1 FROM book_categories WHERE category_id = ? LIMIT 1",
                (category_id,),
            )
            return cursor.fetchone() is not None
