"""
auth/store.py -- SQLAlchemy Core persistence layer for users.

Pattern: Repository + Data Mapper (same as dex/store.py).
UserStore is the repository; _row_to_user is the mapper.
Route and dependency code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  UNIQUE(email) is declared in core/database.py and is the only duplicate
  check. create_user() does not look first -- two concurrent registrations
  for one email both reach the INSERT and the database lets exactly one win.

Layer rule: no imports from api/ or dex/.
"""

from __future__ import annotations

from sqlalchemy.engine import Engine

from auth.models import User
from core.database import new_id, now_iso, users


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(engine)
        user_id = store.create_user(User(email="ash@example.com", hashed_password=hasher.hash("pikachu")))
        user = store.get_by_email("ash@example.com")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def create_user(self, user: User) -> str:
        """Insert a new user and return its generated ID.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        Callers translate that into DuplicateIdentity.
        """
        user_id = new_id()
        with self.engine.begin() as conn:
            conn.execute(
                users.insert().values(
                    id=user_id,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=now_iso(),
                )
            )
        return user_id

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )
