"""
tests/test_tokens.py -- Unit tests for auth/tokens.py.

Covers:
  - issue() then verify() returns the subject
  - tokens carry a 3600s lifetime by default
  - a token past its exp raises TokenExpired
  - tampered tokens, foreign secrets, and garbage raise InvalidToken
  - a signed token without a subject or an exp raises InvalidToken
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from auth.tokens import DEFAULT_TTL_SECONDS, TokenService
from core.errors import InvalidToken, TokenExpired

SECRET = "s" * 32
OTHER_SECRET = "o" * 32


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(SECRET)


class TestIssueVerify:
    def test_roundtrip_returns_subject(self, tokens: TokenService) -> None:
        token = tokens.issue("user-123")
        assert tokens.verify(token) == "user-123"

    def test_default_ttl_is_one_hour(self, tokens: TokenService) -> None:
        assert DEFAULT_TTL_SECONDS == 3600
        claims = jwt.get_unverified_claims(tokens.issue("user-123"))
        assert claims["exp"] - claims["iat"] == 3600

    def test_accepted_just_before_expiry(self, tokens: TokenService) -> None:
        issued = datetime.now(timezone.utc) - timedelta(seconds=DEFAULT_TTL_SECONDS - 30)
        assert tokens.verify(tokens.issue("user-123", issued_at=issued)) == "user-123"

    def test_rejected_after_expiry(self, tokens: TokenService) -> None:
        issued = datetime.now(timezone.utc) - timedelta(seconds=DEFAULT_TTL_SECONDS + 5)
        with pytest.raises(TokenExpired):
            tokens.verify(tokens.issue("user-123", issued_at=issued))

    def test_expired_is_an_invalid_token(self) -> None:
        """The access guard catches InvalidToken; expiry must be covered by it."""
        assert issubclass(TokenExpired, InvalidToken)


class TestRejection:
    def test_wrong_secret(self, tokens: TokenService) -> None:
        foreign = TokenService(OTHER_SECRET).issue("user-123")
        with pytest.raises(InvalidToken):
            tokens.verify(foreign)

    def test_tampered_payload(self, tokens: TokenService) -> None:
        header, payload, signature = tokens.issue("user-123").split(".")
        forged_payload = tokens.issue("attacker").split(".")[1]
        with pytest.raises(InvalidToken):
            tokens.verify(f"{header}.{forged_payload}.{signature}")

    def test_garbage(self, tokens: TokenService) -> None:
        with pytest.raises(InvalidToken):
            tokens.verify("not.a.jwt")

    def test_missing_subject(self, tokens: TokenService) -> None:
        exp = datetime.now(timezone.utc) + timedelta(minutes=5)
        token = jwt.encode({"exp": exp}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            tokens.verify(token)

    def test_missing_expiry(self, tokens: TokenService) -> None:
        token = jwt.encode({"sub": "user-123"}, SECRET, algorithm="HS256")
        with pytest.raises(InvalidToken):
            tokens.verify(token)

    def test_empty_secret_refused(self) -> None:
        with pytest.raises(ValueError):
            TokenService("")
