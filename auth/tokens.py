"""
auth/tokens.py -- JWT issuance and verification.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry only the user id (sub) plus iat and
       exp. They are stateless: there is no revocation list, so expiry is the
       only thing that invalidates a token.

  SECRET_KEY: injected by the caller (api/main.py lifespan passes
       Settings.secret_key). Nothing in this module reads configuration, so
       issuing and verifying code always share the one key they were built
       with.

  Errors: verify() raises TokenExpired for a token past its exp and
       InvalidToken for everything else (bad signature, malformed token,
       missing subject or exp). The access guard collapses both into one 401.

Layer rule: no imports from api/ or dex/. Import from core/ is allowed.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt

from core.errors import InvalidToken, TokenExpired

_ALGORITHM = "HS256"
DEFAULT_TTL_SECONDS = 3600


class TokenService:
    """Signs and verifies bearer tokens with a shared secret.

    Usage:
        tokens = TokenService(settings.secret_key)
        token = tokens.issue(user.id)
        user_id = tokens.verify(token)  # raises InvalidToken / TokenExpired
    """

    def __init__(self, secret_key: str, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> None:
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key.")
        self._secret_key = secret_key
        self.ttl_seconds = ttl_seconds

    def issue(self, user_id: str, issued_at: datetime | None = None) -> str:
        """Encode a signed JWT for user_id, expiring ttl_seconds after issued_at.

        issued_at defaults to now (UTC).
        """
        iat = issued_at or datetime.now(timezone.utc)
        payload = {
            "sub": user_id,
            "iat": iat,
            "exp": iat + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret_key, algorithm=_ALGORITHM)

    def verify(self, token: str) -> str:
        """Verify signature and expiry and return the token subject."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[_ALGORITHM],
                options={"require_exp": True, "require_sub": True},
            )
        except ExpiredSignatureError as e:
            raise TokenExpired() from e
        except JWTError as e:
            raise InvalidToken() from e

        subject = payload.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidToken("Token has no subject")
        return subject
