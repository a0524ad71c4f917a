"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors dex/models.py
-- dataclasses own domain shape; stores and routes do the work.

Layer rule: no imports from api/ or dex/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is the login key and is stored exactly as submitted (case-sensitive).
    hashed_password is a bcrypt digest; the plaintext is never persisted.
    id is None before the record is written to the database.
    """

    email: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, as decoded from a verified bearer token.

    Produced only by auth.dependencies.require_identity(). Every ownership
    decision in dex/ is made against user_id -- never against an identifier
    supplied in the request body or path.
    """

    user_id: str
