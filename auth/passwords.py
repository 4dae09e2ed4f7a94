"""
auth/passwords.py -- CredentialVerifier: bcrypt password hashing and checking.

Security design decisions:
  bcrypt directly (no passlib wrapper). passlib's wrap-bug detection builds a
  password longer than 72 bytes, which bcrypt 4.x+ rejects with an explicit
  error. Direct bcrypt usage is simpler and actively maintained.

  Cost factor defaults to 10 (the long-standing bcrypt default) and is fixed
  per verifier instance. Hashes carry their own cost, so raising the cost
  later does not invalidate existing hashes.

  bcrypt only looks at the first 72 bytes of its input, and recent bcrypt
  releases raise ValueError on longer input. Every password is first reduced
  to base64(sha256(utf-8 bytes)), a 44-byte value with no NUL bytes, so any
  string -- empty or very long -- is hashable and every byte of it counts.
  hash, verify and verify_dummy all go through the same reduction.

  verify() never compares bytes itself. bcrypt.checkpw recomputes the digest
  and compares in constant time. A malformed stored hash and a wrong password
  both raise InvalidCredentials; the caller cannot tell them apart.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import base64
import hashlib
import logging

import bcrypt

from auth.errors import InternalError, InvalidCredentials

logger = logging.getLogger("authcore.auth")

DEFAULT_ROUNDS = 10


def _encode(password: str) -> bytes:
    # surrogatepass: a lone surrogate from decoded JSON still has a byte form.
    raw = password.encode("utf-8", "surrogatepass")
    return base64.b64encode(hashlib.sha256(raw).digest())


class CredentialVerifier:
    """One-way password hashing and constant-effort verification.

    Usage:
        verifier = CredentialVerifier()
        stored = verifier.hash("correct horse")
        verifier.verify(stored, "correct horse")   # returns None
        verifier.verify(stored, "battery staple")  # raises InvalidCredentials
    """

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        self.rounds = rounds
        # Timing equalization dummy hash [C1]. Computed once per verifier so
        # the first unknown-username login is not measurably faster than a
        # wrong-password login against a real hash.
        self._dummy_hash = self.hash("authcore_timing_dummy")

    def hash(self, password: str) -> str:
        """Return a salted bcrypt hash of the given plaintext password.

        Raises InternalError only if salt generation or hashing itself fails
        (entropy or resource exhaustion); input is never rejected.
        """
        try:
            salt = bcrypt.gensalt(rounds=self.rounds)
            return bcrypt.hashpw(_encode(password), salt).decode("utf-8")
        except (ValueError, OSError) as exc:
            logger.error("Password hashing failed: %s", exc)
            raise InternalError() from exc

    def verify(self, password_hash: str, password: str) -> None:
        """Raise InvalidCredentials unless password matches password_hash."""
        try:
            matched = bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
        except ValueError:
            # Malformed or unsupported stored hash. Folded into the same
            # failure as a wrong password.
            logger.warning("Stored password hash could not be parsed")
            matched = False
        if not matched:
            raise InvalidCredentials()

    def verify_dummy(self, password: str) -> None:
        """Spend one bcrypt check for a login that has no stored hash.

        Always call this instead of returning early when the username does
        not exist, so response time does not reveal whether it exists [C1].
        """
        bcrypt.checkpw(_encode(password), self._dummy_hash.encode("utf-8"))
