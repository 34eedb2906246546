"""Category service: the public surface for the category hierarchy.

Every mutation is validated before anything is written, so a rejected
create, update or delete leaves the stored forest untouched.
"""

from collections import defaultdict
from dataclasses import replace
from typing import Dict, List, Optional
from models.category import Category
from models.base import utcnow
from services.errors import (
    CategoryHasDependentsError,
    InvalidCategoryNameError,
    InvalidParentAssignmentError,
    InvalidParentError,
)
from services.hierarchy import DeletionGuard, HierarchyValidator
from logger import get_logger

logger = get_logger()


class CategoryService:
    """Service for managing hierarchical categories."""

    def __init__(self, store, books):
        """Initialize the category service.

        Args:
            store: CategoryStore holding the category nodes.
            books: Book collaborator used by the deletion guard.
        """
        self.store = store
        self.validator = HierarchyValidator(store)
        self.guard = DeletionGuard(store, books)

    def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Category:
        """Create a new category.

        Args:
            name: Category name, must not be blank.
            description: Optional description.
            parent_id: Optional parent category ID.

        Returns:
            The created Category with id and timestamps populated.

        Raises:
            InvalidCategoryNameError: If name is blank.
            InvalidParentError: If parent_id does not reference an existing category.
        """
        if not name or not name.strip():
            raise InvalidCategoryNameError()

        if not self.validator.validate_parent_assignment(None, parent_id):
            logger.warning(f"Rejected category '{name}': parent {parent_id} does not exist")
            raise InvalidParentError(parent_id)

        now = utcnow()
        category = self.store.add(
            Category(
                id=None,
                name=name,
                description=description,
                parent_id=parent_id,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"Created category '{category.name}' (ID: {category.id})")
        return category

    def update_category(
        self,
        category_id: int,
        name: str,
        description: Optional[str] = None,
        parent_id: Optional[int] = None,
    ) -> Optional[Category]:
        """Overwrite a category's name, description and parent.

        Passing parent_id=None turns the category into a root.

        Returns:
            The updated Category, or None if category_id does not exist.

        Raises:
            InvalidCategoryNameError: If name is blank.
            InvalidParentAssignmentError: If parent_id is the category itself,
                does not exist, or is one of its descendants.
        """
        existing = self.store.get_by_id(category_id)
        if existing is None:
            return None

        if not name or not name.strip():
            raise InvalidCategoryNameError()

        if parent_id is not None and not self.validator.validate_parent_assignment(
            category_id, parent_id
        ):
            logger.warning(
                f"Rejected reparenting category {category_id} under {parent_id}"
            )
            raise InvalidParentAssignmentError(category_id, parent_id)

        updated = replace(
            existing,
            name=name,
            description=description,
            parent_id=parent_id,
            updated_at=utcnow(),
        )
        self.store.update(updated)
        logger.info(f"Updated category '{updated.name}' (ID: {category_id})")
        return updated

    def delete_category(self, category_id: int) -> bool:
        """Delete a leaf category.

        Returns:
            True if deleted, False if category_id does not exist.

        Raises:
            CategoryHasDependentsError: If the category has subcategories or books.
        """
        category = self.store.get_by_id(category_id)
        if category is None:
            return False

        if not self.guard.can_delete(category_id):
            logger.warning(f"Refused to delete category {category_id}: has dependents")
            raise CategoryHasDependentsError(category_id)

        self.store.delete(category)
        logger.info(f"Deleted category '{category.name}' (ID: {category_id})")
        return True

    def get_category(self, category_id: int) -> Optional[Category]:
        return self.store.get_by_id(category_id)

    def get_category_with_subcategories(self, category_id: int) -> Optional[Category]:
        """Get a category with its direct children attached."""
        category = self.store.get_by_id(category_id)
        if category is None:
            return None
        category.subcategories = self.store.get_children(category_id)
        return category

    def get_all_categories(self) -> List[Category]:
        return self.store.get_all()

    def get_root_categories(self) -> List[Category]:
        return self.store.get_root_nodes()

    def get_sub_categories(self, parent_id: int) -> List[Category]:
        return self.store.get_children(parent_id)

    def get_category_hierarchy(self) -> List[Category]:
        """Get root categories with their full subtrees nested in subcategories.

        The forest is built from a single read of all categories. Each node is
        attached at most once, so cyclic stored data cannot recurse forever;
        nodes unreachable from any root are left out.
        """
        categories = self.store.get_all()

        children_by_parent: Dict[Optional[int], List[Category]] = defaultdict(list)
        for category in categories:
            children_by_parent[category.parent_id].append(category)

        roots = children_by_parent.get(None, [])
        attached = {root.id for root in roots}
        stack = list(roots)

        while stack:
            node = stack.pop()
            for child in children_by_parent.get(node.id, []):
                if child.id in attached:
                    continue
                attached.add(child.id)
                node.subcategories.append(child)
                stack.append(child)

        return roots

    def get_category_path(self, category_id: int) -> List[Category]:
        """Get the ancestor chain of a category, root first, ending with itself.

        Returns:
            List of categories from the root down, or [] if not found.
        """
        path: List[Category] = []
        seen = set()
        current = self.store.get_by_id(category_id)

        while current is not None and current.id not in seen:
            seen.add(current.id)
            path.append(current)
            if current.parent_id is None:
                break
            current = self.store.get_by_id(current.parent_id)

        path.reverse()
        return path

    def search_categories_by_name(self, term: str) -> List[Category]:
        """Case-insensitive substring search over names and descriptions."""
        return self.store.search_by_name(term)

    def category_exists(self, category_id: int) -> bool:
        return self.store.exists(category_id)

    def can_delete_category(self, category_id: int) -> bool:
        return self.guard.can_delete(category_id)

    def is_valid_parent(self, category_id: Optional[int], parent_id: Optional[int]) -> bool:
        return self.validator.validate_parent_assignment(category_id, parent_id)
