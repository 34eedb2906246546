"""Category model for the book catalog hierarchy."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


@dataclass
class Category:
    """Represents a node in the category forest.

    Attributes:
        id: Unique identifier (auto-generated, None until persisted).
        name: Display label, never empty.
        description: Optional free text.
        parent_id: Optional parent category ID. None marks a root category.
        created_at: Set once when the category is persisted.
        updated_at: Refreshed on every mutation.
        subcategories: Nested children, populated only by hierarchy reads.
    """

    id: Optional[int]
    name: str
    description: Optional[str] = None
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    subcategories: List["Category"] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    def to_dict(self) -> dict:
        """Convert category, including nested subcategories, to a dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "parent_id": self.parent_id,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "subcategories": [child.to_dict() for child in self.subcategories],
        }
