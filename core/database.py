"""
core/database.py -- SQLAlchemy Core schema and engine factory for Catchdex.

Uses SQLAlchemy Core (not ORM) so the dataclasses in auth/models.py and
dex/models.py remain the authoritative domain representation. Swapping SQLite
for PostgreSQL is a connection string change, not a rewrite.

All three tables live in one MetaData because caught_records carries foreign
keys into both users and creatures. The stores (auth/store.py, dex/store.py)
share one Engine built by create_db_engine() in the API lifespan.

Uniqueness that the service relies on for correctness under concurrency is
declared here, at the database level:
  users.email      -- concurrent duplicate registrations: one insert wins.
  creatures.name   -- concurrent first catches of a new name: one insert wins.

Layer rule: core/ is the kernel. No imports from api/, auth/, or dex/.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, Index, MetaData, String, Table, create_engine, event
from sqlalchemy.engine import Engine

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", String(60), nullable=False),  # bcrypt digests are 60 chars
    Column("created_at", String(32), nullable=False),
)

creatures = Table(
    "creatures",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("name", String(100), nullable=False, unique=True),
    Column("created_at", String(32), nullable=False),
)

caught_records = Table(
    "caught_records",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id"), nullable=False),
    Column("creature_id", String(36), ForeignKey("creatures.id"), nullable=False),
    Column("caught_at", String(32), nullable=False),
    Index("ix_caught_records_user_id", "user_id"),
)


# ---------------------------------------------------------------------------
# Connection setup
# ---------------------------------------------------------------------------


def _configure_sqlite(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. SQLite ignores REFERENCES clauses unless
    foreign_keys is switched on for the connection.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")
    dbapi_conn.execute("PRAGMA foreign_keys=ON")


def create_db_engine(db_url: str) -> Engine:
    """Build an Engine for db_url and create any missing tables.

    Usage:
        engine = create_db_engine("sqlite:///catchdex.db")
        users = UserStore(engine)
        dex = DexStore(engine)
        ...
        engine.dispose()
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _configure_sqlite)
    metadata.create_all(engine)
    return engine


# ---------------------------------------------------------------------------
# Helpers shared by the stores
# ---------------------------------------------------------------------------


def new_id() -> str:
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
