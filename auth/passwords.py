"""
auth/passwords.py -- bcrypt password hashing.

Using bcrypt directly rather than passlib[bcrypt] because passlib's internal
wrap-bug detection creates a password longer than 72 bytes, which bcrypt 4.x
rejects with an explicit error. Direct bcrypt usage is simpler and has no
compatibility shim.

bcrypt only reads the first 72 bytes of its input and current releases raise
on anything longer, so the input is cut to that window before both hashing
and verification. Both sides see the same bytes, so matching is unaffected.
"""

from __future__ import annotations

import bcrypt

_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted, cost-parameterized one-way hashing.

    Every call to hash() draws a fresh salt via bcrypt.gensalt(), so two users
    with the same password never share a digest. rounds is the bcrypt cost
    factor (2**rounds iterations); see Settings.bcrypt_rounds.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # Timing equalization dummy hash. Computed once at construction so
        # the first unknown-email login is not measurably slower than later
        # ones. Hashed at the same cost as real records.
        self.dummy_hash: str = self.hash("catchdex_timing_dummy")

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password."""
        return bcrypt.hashpw(_encode(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext matches the hash.

        bcrypt.checkpw compares digests in constant time. A malformed stored
        hash is treated as a mismatch.
        """
        try:
            return bcrypt.checkpw(_encode(plain), hashed.encode("utf-8"))
        except ValueError:
            return False

    def burn(self, plain: str) -> None:
        """Run one verification against the dummy hash and discard the result.

        Called on the unknown-email path so it costs the same bcrypt work as
        a wrong-password check.
        """
        self.verify(plain, self.dummy_hash)
