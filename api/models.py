"""
API request and response models for Catchdex REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
dex/models.py, which own the internal domain representation. Route handlers
map between the two.

Every body the service returns carries either `message`, `data`, or both --
errors included (see the exception handlers in api/main.py).
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from dex.models import CaughtCreature, CaughtRecord, Creature

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CredentialsRequest(BaseModel):
    """Request body for POST /register and POST /login.

    Passwords longer than bcrypt's 72-byte window are accepted; the hasher
    only uses the first 72 bytes.
    """

    email: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


class CatchRequest(BaseModel):
    """Request body for POST /protected/catch.

    name is optional at the schema level so a missing name reaches the store
    and gets the domain message ("Pokemon name is required") rather than a
    generic validation error.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(default=None, max_length=100)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    token: str


class CatalogResponse(BaseModel):
    """Response for GET /pokemon/{name}: the raw catalog record, passed through."""

    data: dict[str, Any]


class CreatureOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str

    @classmethod
    def from_domain(cls, creature: Creature) -> "CreatureOut":
        return cls(id=creature.id, name=creature.name)


class CaughtRecordOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    user_id: str
    creature_id: str
    caught_at: str

    @classmethod
    def from_domain(cls, record: CaughtRecord) -> "CaughtRecordOut":
        return cls(
            id=record.id,
            user_id=record.user_id,
            creature_id=record.creature_id,
            caught_at=record.caught_at,
        )


class CaughtCreatureOut(CaughtRecordOut):
    """One row of GET /protected/caught: the record plus its creature."""

    creature: CreatureOut

    @classmethod
    def from_caught(cls, caught: CaughtCreature) -> "CaughtCreatureOut":
        """Factory Method -- the join mapping lives beside the output model."""
        return cls(
            id=caught.record.id,
            user_id=caught.record.user_id,
            creature_id=caught.record.creature_id,
            caught_at=caught.record.caught_at,
            creature=CreatureOut.from_domain(caught.creature),
        )


class CatchResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    data: CaughtRecordOut


class CaughtListResponse(BaseModel):
    """Response for GET /protected/caught.

    Exactly one of data / message is set: data for a non-empty collection,
    message when the caller owns nothing. Routes serialize with
    response_model_exclude_none so the unset field is omitted.
    """

    model_config = ConfigDict(frozen=True)

    data: Optional[list[CaughtCreatureOut]] = None
    message: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
