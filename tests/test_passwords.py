"""
tests/test_passwords.py -- Unit tests for auth/passwords.py (CredentialVerifier).

Covers:
  - hash/verify round trip, including empty and very long passwords
  - passwords sharing a 72-byte prefix are still told apart
  - wrong password and corrupt stored hash both raise InvalidCredentials
  - salting: two hashes of the same password differ
  - configured cost factor is embedded in the hash
"""

from __future__ import annotations

import pytest

from auth.errors import InvalidCredentials
from auth.passwords import DEFAULT_ROUNDS, CredentialVerifier


@pytest.mark.parametrize("password", ["correct-pw", "", "pässwörd ✓", "x" * 200])
def test_verify_accepts_matching_password(verifier: CredentialVerifier, password: str) -> None:
    verifier.verify(verifier.hash(password), password)


@pytest.mark.parametrize(
    "stored, attempt",
    [
        ("correct-pw", "wrong-pw"),
        ("correct-pw", ""),
        ("", "anything"),
        ("correct-pw", "Correct-pw"),
    ],
)
def test_verify_rejects_other_password(verifier: CredentialVerifier, stored: str, attempt: str) -> None:
    with pytest.raises(InvalidCredentials):
        verifier.verify(verifier.hash(stored), attempt)


@pytest.mark.parametrize("corrupt", ["", "not-a-bcrypt-hash", "$2b$04$tooshort"])
def test_corrupt_hash_is_indistinguishable_from_wrong_password(verifier: CredentialVerifier, corrupt: str) -> None:
    """A malformed stored hash must fail exactly like a wrong password."""
    with pytest.raises(InvalidCredentials) as wrong:
        verifier.verify(verifier.hash("correct-pw"), "wrong-pw")
    with pytest.raises(InvalidCredentials) as broken:
        verifier.verify(corrupt, "correct-pw")
    assert type(wrong.value) is type(broken.value)
    assert str(wrong.value) == str(broken.value)


@pytest.mark.parametrize(
    "stored, attempt",
    [
        ("x" * 72 + "A", "x" * 72 + "B"),
        ("x" * 72 + "A-real-secret-suffix", "x" * 72 + "totally-different"),
        ("é" * 36 + "1", "é" * 36 + "2"),
        ("ü" * 100, "ü" * 99 + "u"),
    ],
)
def test_long_passwords_with_shared_prefix_do_not_match(
    verifier: CredentialVerifier, stored: str, attempt: str
) -> None:
    """Bytes past bcrypt's 72-byte input limit still decide the outcome."""
    assert len(stored.encode("utf-8")) > 72
    with pytest.raises(InvalidCredentials):
        verifier.verify(verifier.hash(stored), attempt)


def test_lone_surrogate_is_hashable(verifier: CredentialVerifier) -> None:
    verifier.verify(verifier.hash("pw\ud800"), "pw\ud800")
    with pytest.raises(InvalidCredentials):
        verifier.verify(verifier.hash("pw\ud800"), "pw")


def test_hash_is_salted(verifier: CredentialVerifier) -> None:
    assert verifier.hash("same") != verifier.hash("same")


def test_hash_embeds_cost_factor() -> None:
    assert CredentialVerifier(rounds=5).hash("pw").startswith("$2b$05$")


def test_default_cost_factor_is_ten() -> None:
    assert DEFAULT_ROUNDS == 10


def test_verify_dummy_does_not_raise(verifier: CredentialVerifier) -> None:
    verifier.verify_dummy("whatever")
