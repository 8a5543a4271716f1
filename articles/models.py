"""
articles/models.py -- Domain dataclass for blog articles.

Pure data container with zero logic. Tag normalisation lives in
articles/store.py; ownership rules live in articles/permissions.py.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Article:
    """A published article.

    created_by is the id of the User who created the article. It is set once
    on insert and never updated; it alone decides who may edit or delete.

    author is a free-text display name, independent of created_by.

    id is None before the record is written to the database.
    """

    title: str
    content: str
    created_by: int
    author: str = "Anonymous"
    tags: list[str] = field(default_factory=list)
    id: Optional[int] = None
    created_at: str = ""  # ISO 8601, set by store on insert
    updated_at: str = ""  # ISO 8601, refreshed by store on every update
