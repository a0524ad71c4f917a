"""
api/main.py -- FastAPI application entry point for Catchdex.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost; Starlette wraps each add_middleware
call around the ones registered before it):
  1. log_requests          -- one access-log line per request
  2. SlowAPIMiddleware     -- applies default limits; decorated routes check their own
  3. CORSMiddleware        -- adds CORS headers for allowed browser origins
  4. TrustedHostMiddleware -- rejects requests with unexpected Host headers

Lifespan builds every long-lived collaborator once and hangs it on app.state:
the database engine, the stores, the credential and token services, and the
catalog client. Route handlers and the access guard read them from there, so
the signing secret is loaded from configuration exactly once and shared by
issue and verify.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.limiter import limiter
from api.models import HealthResponse
from api.routes.auth import router as auth_router
from api.routes.catalog import router as catalog_router
from api.routes.protected import router as protected_router
from auth.credentials import CredentialService
from auth.passwords import PasswordHasher
from auth.store import UserStore
from auth.tokens import TokenService
from core.catalog import CatalogClient
from core.config import get_settings
from core.database import create_db_engine
from core.errors import CatchdexError, InternalFailure
from dex.store import DexStore

_VERSION = "0.1.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("catchdex.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The engine is created first because both stores share it.
    """
    settings = get_settings()
    logger.info("Catchdex API starting up")

    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    user_store = UserStore(engine)
    app.state.dex = DexStore(engine)
    logger.info("Database initialized")

    app.state.credentials = CredentialService(user_store, PasswordHasher(settings.bcrypt_rounds))
    app.state.token_service = TokenService(settings.secret_key, settings.token_expire_seconds)
    logger.info(
        "Auth initialized (bcrypt_rounds=%d, token_ttl=%ds)",
        settings.bcrypt_rounds,
        settings.token_expire_seconds,
    )

    app.state.catalog = CatalogClient(settings.catalog_base_url, settings.catalog_timeout)

    yield

    app.state.catalog.close()
    engine.dispose()
    logger.info("Catchdex API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Catchdex API",
    description="Register, log in, and keep a personal collection of caught Pokémon.",
    version=_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# The last one registered is the first to see a request:
# SlowAPI -> CORS -> TrustedHost.
# ---------------------------------------------------------------------------

app.add_middleware(
    TrustedHostMiddleware,
    allowed_hosts=_settings.allowed_hosts,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)

app.add_middleware(SlowAPIMiddleware)

# SlowAPI looks for app.state.limiter by convention.
app.state.limiter = limiter


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, tags=["Auth"])
app.include_router(catalog_router, tags=["Catalog"])
app.include_router(protected_router, tags=["Collection"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {"message": ...} envelope so API clients can
# parse errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _message(status_code: int, message: str) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content={"message": message})
    if status_code == 401:
        response.headers["WWW-Authenticate"] = "Bearer"
    return response


@app.exception_handler(CatchdexError)
async def catchdex_error_handler(request: Request, exc: CatchdexError) -> JSONResponse:
    """Render a domain error with its own status and client-safe message.

    5xx domain errors (catalog failures, internal failures) are logged; the
    4xx ones are ordinary client outcomes.
    """
    if exc.status_code >= 500:
        logger.error(
            "%s on %s %s: %s",
            type(exc).__name__,
            request.method,
            request.url.path,
            exc.__cause__ or exc.message,
        )
    return _message(exc.status_code, exc.message)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 when a rate limit is exceeded.

    Retry-After tells clients how many seconds to wait before retrying.
    """
    retry_after = int(getattr(exc, "retry_after", 60))
    response = _message(429, "Too many requests.")
    response.headers["Retry-After"] = str(retry_after)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 when the request body or parameters fail validation."""
    logger.debug("Validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    return _message(400, "Invalid request body")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return {"message": ...} for FastAPI/Starlette HTTP exceptions (404 routes, 405 methods)."""
    return _message(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception is written to the log only, never to the response body.
    The client receives only a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    failure = InternalFailure()
    return _message(failure.status_code, failure.message)


# ---------------------------------------------------------------------------
# Health endpoint
#
# No auth and no rate limit -- health checks from load balancers and
# monitoring systems must not be throttled.
# ---------------------------------------------------------------------------


@app.get("/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return liveness, version, and a database round-trip check."""
    components = {"app": "ok", "database": "ok"}
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception:
        logger.exception("Health check: database unreachable")
        components["database"] = "error"
    status = "healthy" if components["database"] == "ok" else "degraded"
    return HealthResponse(status=status, version=_VERSION, components=components)
