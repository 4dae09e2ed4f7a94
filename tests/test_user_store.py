"""Unit tests for auth/store.py -- UserStore repository.

Covers:
- find_credential_by_username() returns the stored hash and subject ID
- find_profile_by_subject_id() returns the username
- unknown keys return None rather than raising
- duplicate usernames raise IntegrityError
- delete_user() and has_users()
"""

import pytest
from sqlalchemy.exc import IntegrityError

from auth.models import Credential, Profile


@pytest.fixture
def store(store_factory):
    return store_factory()


def test_empty_store_has_no_users(store):
    assert store.has_users() is False


def test_create_and_find_credential(store):
    subject_id = store.create_user("alice", "$2b$04$hash")
    assert store.has_users() is True
    assert store.find_credential_by_username("alice") == Credential(
        subject_id=subject_id, username="alice", password_hash="$2b$04$hash"
    )


def test_find_profile_by_subject_id(store):
    subject_id = store.create_user("alice", "$2b$04$hash")
    assert store.find_profile_by_subject_id(subject_id) == Profile(subject_id=subject_id, username="alice")


def test_subject_ids_are_unique_opaque_strings(store):
    a = store.create_user("alice", "h1")
    b = store.create_user("bob", "h2")
    assert a != b
    assert len(a) == 32 and all(c in "0123456789abcdef" for c in a)


def test_unknown_username_returns_none(store):
    store.create_user("alice", "h")
    assert store.find_credential_by_username("ghost") is None
    assert store.find_credential_by_username("ALICE") is None


def test_unknown_subject_returns_none(store):
    assert store.find_profile_by_subject_id("0" * 32) is None


def test_duplicate_username_rejected(store):
    store.create_user("alice", "h1")
    with pytest.raises(IntegrityError):
        store.create_user("alice", "h2")


def test_delete_user(store):
    subject_id = store.create_user("alice", "h")
    assert store.delete_user(subject_id) is True
    assert store.find_profile_by_subject_id(subject_id) is None
    assert store.delete_user(subject_id) is False


def test_stores_are_isolated(store_factory):
    first, second = store_factory(), store_factory()
    first.create_user("alice", "h")
    assert second.find_credential_by_username("alice") is None
