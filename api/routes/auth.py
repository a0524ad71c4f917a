"""
api/routes/auth.py -- Registration and login endpoints.

Routes:
  POST /register  -- create an account; 200 with a message either way
  POST /login     -- verify credentials; 200 with a bearer token

Behaviour kept deliberately:
  A duplicate email on /register answers 200 {"message": "Email already
  exists"} rather than a 409. Clients built against this API rely on it.

Security:
  POST /login is rate-limited per client IP (Settings.login_rate_limit).
  CredentialService runs one bcrypt comparison whether or not the email
  exists. The status code still differs: 404 for an unknown email, 401 for
  a wrong password.
  Cache-Control: no-store on login responses so tokens are never cached.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import CredentialsRequest, LoginResponse, MessageResponse
from auth.credentials import CredentialService
from auth.tokens import TokenService
from core.config import get_settings
from core.errors import DuplicateIdentity

logger = logging.getLogger("catchdex.api")

# Auth policy:
# - POST /register: public
# - POST /login:    public, rate-limited
router = APIRouter()


def _login_rate_limit() -> str:
    return get_settings().login_rate_limit


@router.post("/register", response_model=MessageResponse)
def register(request: Request, body: CredentialsRequest) -> MessageResponse:
    """Create a user. Duplicate emails get a 200 with an explanatory message."""
    credentials: CredentialService = request.app.state.credentials
    try:
        user = credentials.register(body.email, body.password)
    except DuplicateIdentity as exc:
        return MessageResponse(message=exc.message)
    return MessageResponse(message=f"{user.email} created successfully")


@router.post("/login", response_model=LoginResponse)
@limiter.limit(_login_rate_limit)
def login(request: Request, body: CredentialsRequest) -> JSONResponse:
    """Exchange email and password for a bearer token.

    NotFound (unknown email) and InvalidCredentials (wrong password) propagate
    to the CatchdexError handler, which renders 404 / 401.
    """
    credentials: CredentialService = request.app.state.credentials
    token_service: TokenService = request.app.state.token_service

    user = credentials.authenticate(body.email, body.password)
    token = token_service.issue(user.id)
    logger.info("Issued token for user %s", user.id)

    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(message="Login successful", token=token).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp
