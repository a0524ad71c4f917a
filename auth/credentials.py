"""
auth/credentials.py -- Registration and password verification.

CredentialService joins UserStore (persistence) and PasswordHasher (crypto)
into the three operations the HTTP layer needs: register, verify, and
authenticate (verify + return the User for token issuance).

Timing: verify() and authenticate() always run exactly one bcrypt
comparison. For an unknown email the comparison runs against the hasher's
dummy digest before NotFound is raised, so the hashing layer costs the same
whether the email exists or the password is wrong. The HTTP layer still
reports the two cases with different status codes (404 vs 401).

Layer rule: no imports from api/ or dex/.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.passwords import PasswordHasher
from auth.store import UserStore
from core.errors import DuplicateIdentity, InvalidCredentials, NotFound

logger = logging.getLogger("catchdex.auth")


class CredentialService:
    def __init__(self, store: UserStore, hasher: PasswordHasher) -> None:
        self.store = store
        self.hasher = hasher

    def register(self, email: str, password: str) -> User:
        """Hash password and persist a new User.

        Raises DuplicateIdentity if email is already registered. The UNIQUE
        constraint decides; there is no look-before-insert.
        """
        user = User(email=email, hashed_password=self.hasher.hash(password))
        try:
            user.id = self.store.create_user(user)
        except IntegrityError as exc:
            raise DuplicateIdentity() from exc
        logger.info("Registered user %s", user.id)
        return user

    def verify(self, email: str, password: str) -> bool:
        """Return whether password matches the stored hash for email.

        Raises NotFound if no user has that email. Writes nothing.
        """
        user, matched = self._check(email, password)
        if user is None:
            raise NotFound("User not found")
        return matched

    def authenticate(self, email: str, password: str) -> User:
        """Return the User for a correct email/password pair.

        Raises NotFound for an unknown email, InvalidCredentials for a wrong
        password.
        """
        user, matched = self._check(email, password)
        if user is None:
            raise NotFound("User not found")
        if not matched:
            raise InvalidCredentials()
        return user

    def _check(self, email: str, password: str) -> tuple[User | None, bool]:
        user = self.store.get_by_email(email)
        if user is None:
            # Equalize timing -- do NOT return before running bcrypt.
            self.hasher.burn(password)
            return None, False
        return user, self.hasher.verify(password, user.hashed_password)
