"""Error types raised by catalog services."""

from typing import Optional


class CatalogError(Exception):
    """Base exception for catalog services."""


class CategoryError(CatalogError):
    """Base exception for category operations."""


class CategoryNotFoundError(CategoryError):
    """Raised when an operation references a category that does not exist."""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(f"Category with ID {category_id} not found")


class InvalidParentError(CategoryError):
    """Raised when a new category names a parent that does not exist."""

    def __init__(self, parent_id: int):
        self.parent_id = parent_id
        super().__init__(f"Parent category with ID {parent_id} does not exist")


class InvalidParentAssignmentError(CategoryError):
    """Raised when reparenting would self-parent, orphan or create a cycle."""

    def __init__(self, category_id: int, parent_id: Optional[int]):
        self.category_id = category_id
        self.parent_id = parent_id
        super().__init__(
            f"Invalid parent category assignment: category {category_id} "
            f"cannot be placed under {parent_id}"
        )


class CategoryHasDependentsError(CategoryError):
    """Raised when deleting a category that still has subcategories or books."""

    def __init__(self, category_id: int):
        self.category_id = category_id
        super().__init__(
            f"Cannot delete category {category_id}: "
            "it has subcategories or associated books"
        )


class InvalidCategoryNameError(CategoryError, ValueError):
    """Raised when a category name is empty."""

    def __init__(self):
        super().__init__("Category name cannot be empty")


class BookNotFoundError(CatalogError):
    """Raised when an operation references a book that does not exist."""

    def __init__(self, book_id: int):
        self.book_id = book_id
        super().__init__(f"Book with ID {book_id} not found")
