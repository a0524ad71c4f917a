"""
dex/models.py -- Domain dataclasses for the creature collection.

These are pure data containers with zero logic. Ownership filtering, lazy
creature creation, and the atomic release all live in dex/store.py.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class Creature:
    """A catalog entry cached locally by name.

    Shared by every user -- nobody owns a Creature. Created the first time
    anyone catches that name and never modified afterwards.
    """

    name: str
    id: Optional[str] = None
    created_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class CaughtRecord:
    """One catch: user_id owns it, creature_id says what was caught.

    Catching the same creature twice produces two records with distinct ids.
    """

    user_id: str
    creature_id: str
    id: Optional[str] = None
    caught_at: str = ""  # ISO 8601, set by store on insert


@dataclass
class CaughtCreature:
    """A CaughtRecord joined with its Creature -- the list_caught() read model."""

    record: CaughtRecord
    creature: Creature
