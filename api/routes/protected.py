"""
api/routes/protected.py -- Ownership-scoped collection endpoints.

Routes (all under /protected, all require a bearer token):
  POST   /protected/catch          -- catch a creature by name
  DELETE /protected/release/{id}   -- release one of your caught records
  GET    /protected/caught         -- list your caught records

Every handler takes `identity` from require_identity and hands it to
DexStore. No handler reads a user id from the body or the path; the {id} in
/release is a record id, and DexStore matches it together with the caller's
user id in one DELETE.
"""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from api.models import (
    CatchRequest,
    CatchResponse,
    CaughtCreatureOut,
    CaughtListResponse,
    CaughtRecordOut,
    MessageResponse,
)
from auth.dependencies import require_identity
from auth.models import Identity
from core.errors import InvalidInput
from dex.store import DexStore

# Auth policy:
# - everything on this router: requires a valid bearer token (require_identity)
router = APIRouter(prefix="/protected")


async def catch_body(request: Request, identity: Identity = Depends(require_identity)) -> CatchRequest:
    """Decode the catch body once require_identity has accepted the caller.

    Undecodable JSON or a body that does not fit CatchRequest raises
    InvalidInput.
    """
    try:
        return CatchRequest.model_validate_json(await request.body())
    except ValidationError as exc:
        raise InvalidInput() from exc


@router.post("/catch", response_model=CatchResponse)
def catch(
    request: Request,
    body: CatchRequest = Depends(catch_body),
    identity: Identity = Depends(require_identity),
) -> CatchResponse:
    """Record a catch for the caller. 400 when name is missing or blank."""
    dex: DexStore = request.app.state.dex
    record = dex.catch(identity, body.name or "")
    return CatchResponse(message="Pokemon caught", data=CaughtRecordOut.from_domain(record))


@router.delete("/release/{record_id}", response_model=MessageResponse)
def release(
    request: Request,
    record_id: str,
    identity: Identity = Depends(require_identity),
) -> MessageResponse:
    """Release one of the caller's records. 404 if missing or owned by someone else."""
    dex: DexStore = request.app.state.dex
    dex.release(identity, record_id)
    return MessageResponse(message="Pokemon is released")


@router.get("/caught", response_model=CaughtListResponse, response_model_exclude_none=True)
def list_caught(
    request: Request,
    identity: Identity = Depends(require_identity),
) -> CaughtListResponse:
    """List the caller's records joined with creature details."""
    dex: DexStore = request.app.state.dex
    caught = dex.list_caught(identity)
    if not caught:
        return CaughtListResponse(message="No Pokémon found.")
    return CaughtListResponse(data=[CaughtCreatureOut.from_caught(c) for c in caught])
