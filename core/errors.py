"""
core/errors.py -- Domain error taxonomy for Catchdex.

Every failure the service knows how to describe is a CatchdexError subclass
carrying the HTTP status and the client-safe message. Stores and services
raise these; api/main.py registers one exception handler that renders any
CatchdexError as {"message": ...} with its status code. Route handlers only
catch an error when the HTTP contract needs a different outcome (the
duplicate-email registration path).

Anything that is NOT a CatchdexError is unexpected and ends up in the
catch-all handler: logged with traceback, surfaced as a generic 500.

Layer rule: core/ is the kernel. No imports from api/, auth/, or dex/.
"""

from __future__ import annotations


class CatchdexError(Exception):
    """Base class. Subclasses override status_code and default_message."""

    status_code: int = 500
    default_message: str = "Internal Server Error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CatchdexError):
    status_code = 400
    default_message = "Invalid request body"


class Unauthorized(CatchdexError):
    status_code = 401
    default_message = "Unauthorized"


class InvalidCredentials(CatchdexError):
    status_code = 401
    default_message = "Invalid credentials"


class InvalidToken(CatchdexError):
    """Token signature, structure, or claims are not acceptable."""

    status_code = 401
    default_message = "Invalid token"


class TokenExpired(InvalidToken):
    default_message = "Token expired"


class NotFound(CatchdexError):
    status_code = 404
    default_message = "Not found"


class DuplicateIdentity(CatchdexError):
    status_code = 409
    default_message = "Email already exists"


class UpstreamFailure(CatchdexError):
    """The external catalog was unreachable or answered with an error."""

    status_code = 500
    default_message = "Error fetching Pokémon data"


class InternalFailure(CatchdexError):
    """Any exception that is not a CatchdexError, as rendered by the catch-all handler."""

    status_code = 500
    default_message = "Internal Server Error"
