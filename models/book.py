from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Book:
    id: int
    title: str
    isbn: Optional[str] = None  # ISBN-10 or ISBN-13, stored as entered
    created_at: Optional[datetime] = None
