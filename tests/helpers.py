"""Helper utilities for tests."""

from typing import Dict, List, Optional
from models.category import Category


def create_chain(services, *names: str) -> List[Category]:
    """Create a linear hierarchy where each name is the child of the previous one.

    Returns:
        The created categories, root first.
    """
    created: List[Category] = []
    parent_id: Optional[int] = None
    for name in names:
        category = services.categories.create_category(name, parent_id=parent_id)
        created.append(category)
        parent_id = category.id
    return created


def force_parent(conn, category_id: int, parent_id: Optional[int]) -> None:
    """Write a parent_id directly, bypassing validation (to simulate corrupt data)."""
    conn.execute(
        "UPDATE categories SET parent_id = ? WHERE id = ?", (parent_id, category_id)
    )
    conn.commit()


def has_cycle(categories: List[Category]) -> bool:
    """Check whether following parent links from any category revisits it."""
    parents: Dict[int, Optional[int]] = {c.id: c.parent_id for c in categories}
    for start in parents:
        seen = set()
        current: Optional[int] = start
        while current is not None:
            if current in seen:
                return True
            seen.add(current)
            current = parents.get(current)
    return False
