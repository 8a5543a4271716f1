"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in articles/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/ or articles/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered author.

    username and email are each unique across all users. hashed_password is a
    bcrypt hash; the plaintext is never stored, and the hash itself never
    leaves the server (api/models.PublicUser has no field for it).

    id is None before the record is written to the database.
    """

    username: str
    email: str
    hashed_password: str
    first_name: str = ""
    last_name: str = ""
    id: int | None = None
    created_at: str | None = None  # ISO 8601, set by store on insert
