"""
dex/store.py -- SQLAlchemy-backed persistence for caught creatures.

Pattern: Repository + Data Mapper. DexStore is the repository; the _row_to_*
functions translate raw DB rows into the dataclasses in dex/models.py.
Route handlers never touch SQL directly.

Ownership: every public method takes the caller's Identity (from the access
guard) and filters on caught_records.user_id = identity.user_id. There is no
method that reads or deletes a record without that filter.

Concurrency: no method does read-modify-write in Python.
  - Creature lazy creation relies on UNIQUE(creatures.name). Known names are
    found by a plain SELECT. For a new name the INSERT is attempted, and an
    IntegrityError means another request created the row first, so that row
    is re-read and used.
  - release() is one DELETE filtered on both id and user_id. Two concurrent
    releases of one record: one deletes, the other sees rowcount 0.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = DexStore(engine)
    record = store.catch(identity, "eevee")
    caught = store.list_caught(identity)
    store.release(identity, record.id)
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from auth.models import Identity
from core.database import caught_records, creatures, new_id, now_iso
from core.errors import InvalidInput, NotFound, Unauthorized
from dex.models import CaughtCreature, CaughtRecord, Creature

logger = logging.getLogger("catchdex.dex")


class DexStore:
    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    # ------------------------------------------------------------------
    # Creatures (shared, lazily created)
    # ------------------------------------------------------------------

    def get_creature_by_name(self, name: str) -> Optional[Creature]:
        with self.engine.connect() as conn:
            row = conn.execute(creatures.select().where(creatures.c.name == name)).fetchone()
        return _row_to_creature(row) if row is not None else None

    def get_or_create_creature(self, name: str) -> Creature:
        """Return the Creature called name, creating it on first reference.

        First writer wins. A losing concurrent INSERT fails on UNIQUE(name)
        and falls through to re-read the winner's row, so a name never maps
        to two rows.
        """
        existing = self.get_creature_by_name(name)
        if existing is not None:
            return existing

        creature = Creature(name=name, id=new_id(), created_at=now_iso())
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    creatures.insert().values(id=creature.id, name=creature.name, created_at=creature.created_at)
                )
        except IntegrityError:
            winner = self.get_creature_by_name(name)
            if winner is None:
                raise
            return winner
        logger.info("Created creature %r (%s)", name, creature.id)
        return creature

    # ------------------------------------------------------------------
    # Caught records (owned)
    # ------------------------------------------------------------------

    def catch(self, identity: Identity, creature_name: str) -> CaughtRecord:
        """Record that identity caught creature_name. Returns the new record.

        Raises InvalidInput for an empty name. No dedup: each call inserts a
        new row. A token whose subject no longer matches a user fails the
        caught_records.user_id foreign key and raises Unauthorized.
        """
        if not creature_name or not creature_name.strip():
            raise InvalidInput("Pokemon name is required")

        creature = self.get_or_create_creature(creature_name)
        record = CaughtRecord(
            id=new_id(),
            user_id=identity.user_id,
            creature_id=creature.id,
            caught_at=now_iso(),
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    caught_records.insert().values(
                        id=record.id,
                        user_id=record.user_id,
                        creature_id=record.creature_id,
                        caught_at=record.caught_at,
                    )
                )
        except IntegrityError as exc:
            logger.warning("Catch rejected: no user %s", identity.user_id)
            raise Unauthorized() from exc
        return record

    def release(self, identity: Identity, record_id: str) -> None:
        """Delete record_id if and only if identity owns it.

        Raises NotFound when nothing was deleted -- the record does not exist
        or belongs to someone else. The two cases are indistinguishable to
        the caller.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                caught_records.delete().where(
                    (caught_records.c.id == record_id) & (caught_records.c.user_id == identity.user_id)
                )
            )
        if result.rowcount == 0:
            raise NotFound("Pokemon not found or not owned by user")

    def list_caught(self, identity: Identity) -> list[CaughtCreature]:
        """Return identity's records joined with their creatures, oldest first.

        Empty list (not an error) when the caller owns nothing.
        """
        stmt = (
            select(
                caught_records.c.id,
                caught_records.c.user_id,
                caught_records.c.creature_id,
                caught_records.c.caught_at,
                creatures.c.name.label("creature_name"),
                creatures.c.created_at.label("creature_created_at"),
            )
            .select_from(caught_records.join(creatures, caught_records.c.creature_id == creatures.c.id))
            .where(caught_records.c.user_id == identity.user_id)
            .order_by(caught_records.c.caught_at, caught_records.c.id)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(stmt).fetchall()
        return [_row_to_caught_creature(r) for r in rows]


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_creature(row) -> Creature:
    return Creature(id=row.id, name=row.name, created_at=row.created_at)


def _row_to_caught_creature(row) -> CaughtCreature:
    return CaughtCreature(
        record=CaughtRecord(
            id=row.id,
            user_id=row.user_id,
            creature_id=row.creature_id,
            caught_at=row.caught_at,
        ),
        creature=Creature(
            id=row.creature_id,
            name=row.creature_name,
            created_at=row.creature_created_at,
        ),
    )
