"""
tests/test_cli.py -- Tests for the administrative CLI in main.py.

Passwords are fed through --password-stdin so no terminal prompt is needed.
"""

from __future__ import annotations

import io
import uuid

import main
from auth.passwords import CredentialVerifier
from auth.store import UserStore


def _db_url() -> str:
    return f"sqlite:///file:test_cli_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


def test_no_command_prints_help(capsys) -> None:
    assert main.main([]) == 0
    assert "create-user" in capsys.readouterr().out


def test_hash_password(monkeypatch, capsys) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("s3cret\n"))
    assert main.main(["hash-password", "--password-stdin"]) == 0
    hashed = capsys.readouterr().out.strip()
    CredentialVerifier(rounds=4).verify(hashed, "s3cret")


def test_create_user(monkeypatch, capsys) -> None:
    url = _db_url()
    # Keep one connection open so the shared in-memory DB outlives the CLI's store.
    keeper = UserStore(url)
    try:
        monkeypatch.setattr("sys.stdin", io.StringIO("s3cret\n"))
        assert main.main(["create-user", "alice", "--database-url", url, "--password-stdin"]) == 0
        subject_id = capsys.readouterr().out.strip()

        credential = keeper.find_credential_by_username("alice")
        assert credential is not None
        assert credential.subject_id == subject_id
        CredentialVerifier(rounds=4).verify(credential.password_hash, "s3cret")
    finally:
        keeper.close()


def test_create_duplicate_user_fails(monkeypatch, capsys) -> None:
    url = _db_url()
    keeper = UserStore(url)
    try:
        keeper.create_user("alice", "h")
        monkeypatch.setattr("sys.stdin", io.StringIO("s3cret\n"))
        assert main.main(["create-user", "alice", "--database-url", url, "--password-stdin"]) == 1
        assert "already exists" in capsys.readouterr().err
    finally:
        keeper.close()
