"""
auth/dependencies.py -- The access guard: FastAPI Depends() helpers for bearer auth.

Every protected route declares `identity: Identity = Depends(require_identity)`.
That dependency is the only place a request's identity is established:

  1. Read the Authorization header; require the "Bearer <token>" scheme.
  2. Verify the token with the TokenService injected into app.state at startup.
  3. Return an Identity carrying the token subject.

Any failure -- missing header, wrong scheme, empty token, bad signature,
expired token -- raises the same Unauthorized. Callers cannot tell which
check failed.

Layer rule: no imports from api/ or dex/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

import logging

from fastapi import Request

from auth.models import Identity
from auth.tokens import TokenService
from core.errors import InvalidToken, Unauthorized

logger = logging.getLogger("catchdex.auth")


def _bearer_token(request: Request) -> str | None:
    """Return the bearer token from the Authorization header, or None if absent/malformed."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def try_get_identity(request: Request) -> Identity | None:
    """Attempt to authenticate the request. Returns None on any failure; never raises."""
    token = _bearer_token(request)
    if token is None:
        return None
    token_service: TokenService = request.app.state.token_service
    try:
        return Identity(user_id=token_service.verify(token))
    except InvalidToken as e:
        logger.debug("Rejected bearer token: %s", e.message)
        return None


def require_identity(request: Request) -> Identity:
    """Require a valid bearer token. Raises Unauthorized (401) otherwise.

    Use as a FastAPI dependency:
        @router.get("/caught")
        def route(identity: Identity = Depends(require_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise Unauthorized()
    return identity
