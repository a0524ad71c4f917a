"""
tests/test_credentials.py -- Unit tests for auth/credentials.py and auth/store.py.

Covers:
  - register() persists a hashed password and returns the new User
  - duplicate email raises DuplicateIdentity and leaves one row
  - emails are case-sensitive as stored
  - verify() returns True/False, raises NotFound for unknown email
  - authenticate() raises InvalidCredentials vs NotFound
  - unknown-email path still runs bcrypt (timing equalization)
  - concurrent duplicate registrations: exactly one wins
"""

from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.engine import Engine

from auth.credentials import CredentialService
from auth.passwords import PasswordHasher
from auth.store import UserStore
from core.database import users
from core.errors import DuplicateIdentity, InvalidCredentials, NotFound


def _user_rows(engine: Engine, email: str) -> int:
    with engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(users).where(users.c.email == email)).scalar()


@pytest.fixture(scope="module")
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def store(memory_engine: Engine) -> UserStore:
    return UserStore(memory_engine)


@pytest.fixture
def credentials(store: UserStore, hasher: PasswordHasher) -> CredentialService:
    return CredentialService(store, hasher)


class TestRegister:
    def test_register_persists_hashed_user(self, credentials: CredentialService, store: UserStore) -> None:
        user = credentials.register("a@x.com", "pw1")
        assert user.id
        stored = store.get_by_email("a@x.com")
        assert stored is not None
        assert stored.id == user.id
        assert stored.email == "a@x.com"
        assert stored.hashed_password != "pw1"
        assert stored.created_at

    def test_duplicate_email_rejected(self, credentials: CredentialService, store: UserStore) -> None:
        credentials.register("dup@x.com", "pw1")
        with pytest.raises(DuplicateIdentity):
            credentials.register("dup@x.com", "another")
        assert _user_rows(store.engine, "dup@x.com") == 1

    def test_email_is_case_sensitive(self, credentials: CredentialService) -> None:
        first = credentials.register("Case@x.com", "pw1")
        second = credentials.register("case@x.com", "pw1")
        assert first.id != second.id


class TestVerify:
    def test_verify_true_and_false(self, credentials: CredentialService) -> None:
        credentials.register("v@x.com", "pw1")
        assert credentials.verify("v@x.com", "pw1") is True
        assert credentials.verify("v@x.com", "wrong") is False

    def test_verify_unknown_email(self, credentials: CredentialService) -> None:
        with pytest.raises(NotFound):
            credentials.verify("ghost@x.com", "pw1")

    def test_unknown_email_still_runs_bcrypt(self, credentials: CredentialService, hasher: PasswordHasher) -> None:
        with patch.object(hasher, "verify", wraps=hasher.verify) as spy:
            with pytest.raises(NotFound):
                credentials.verify("ghost@x.com", "pw1")
        spy.assert_called_once_with("pw1", hasher.dummy_hash)


class TestAuthenticate:
    def test_authenticate_returns_user(self, credentials: CredentialService) -> None:
        registered = credentials.register("auth@x.com", "pw1")
        assert credentials.authenticate("auth@x.com", "pw1").id == registered.id

    def test_wrong_password(self, credentials: CredentialService) -> None:
        credentials.register("wrong@x.com", "pw1")
        with pytest.raises(InvalidCredentials):
            credentials.authenticate("wrong@x.com", "pw2")

    def test_unknown_email(self, credentials: CredentialService) -> None:
        with pytest.raises(NotFound):
            credentials.authenticate("nobody@x.com", "pw1")


class TestConcurrentRegistration:
    def test_exactly_one_concurrent_registration_wins(self, file_engine: Engine, hasher: PasswordHasher) -> None:
        """Two threads register the same email at once; the UNIQUE constraint decides."""
        store = UserStore(file_engine)
        credentials = CredentialService(store, hasher)
        barrier = threading.Barrier(2)

        def attempt() -> str:
            barrier.wait()
            try:
                credentials.register("race@x.com", "pw1")
            except DuplicateIdentity:
                return "duplicate"
            return "created"

        with ThreadPoolExecutor(max_workers=2) as pool:
            outcomes = sorted(pool.map(lambda _: attempt(), range(2)))

        assert outcomes == ["created", "duplicate"]
        assert _user_rows(store.engine, "race@x.com") == 1
