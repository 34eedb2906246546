"""Hierarchy rules for the category forest.

Both classes here are queries: they read the current persisted state and
answer with a boolean. Raising errors for a failed check is the job of
CategoryService.
"""

from typing import Optional, Set


class HierarchyValidator:
    """Decides whether a parent assignment keeps the forest acyclic."""

    def __init__(self, store):
        """Initialize the validator.

        Args:
            store: CategoryStore used to read existing nodes and children.
        """
        self.store = store

    def validate_parent_assignment(
        self, child_id: Optional[int], candidate_parent_id: Optional[int]
    ) -> bool:
        """Check whether candidate_parent_id may become the parent of child_id.

        Args:
            child_id: ID of the category being placed, or None for a category
                that has not been created yet.
            candidate_parent_id: Proposed parent ID, or None for a root.

        Returns:
            True if the assignment is legal. False if it would self-parent,
            reference a missing category, or place child_id beneath one of
            its own descendants.
        """
        if candidate_parent_id is None:
            return True

        if child_id is not None and child_id == candidate_parent_id:
            return False

        if not self.store.exists(candidate_parent_id):
            return False

        # A node that does not exist yet has no descendants
        if child_id is None:
            return True

        # The new parent must not sit anywhere in the subtree of the child
        return not self.is_descendant(candidate_parent_id, child_id)

    def is_descendant(self, node_id: int, ancestor_id: int) -> bool:
        """Check whether node_id lies in the subtree below ancestor_id.

        Walks children depth-first with an explicit stack. Visited IDs are
        tracked so a corrupt cycle in stored data cannot loop forever.
        """
        stack = [ancestor_id]
        visited: Set[int] = {ancestor_id}

        while stack:
            current = stack.pop()
            for child in self.store.get_children(current):
                if child.id == node_id:
                    return True
                if child.id not in visited:
                    visited.add(child.id)
                    stack.append(child.id)

        return False


class DeletionGuard:
    """Decides whether a category may be removed."""

    def __init__(self, store, books):
        """Initialize the guard.

        Args:
            store: CategoryStore used to look up the category and its children.
            books: Book collaborator exposing category_has_books(category_id).
        """
        self.store = store
        self.books = books

    def can_delete(self, category_id: int) -> bool:
        """Only existing leaf categories without linked books can be deleted."""
        if not self.store.exists(category_id):
            return False

        if self.store.get_children(category_id):
            return False

        if self.books.category_has_books(category_id):
            return False

        return True
