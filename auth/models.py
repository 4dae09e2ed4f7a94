"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container). Stores, the coordinator and the
routes do the work; these classes own domain shape. TokenClaims is the one
exception -- it owns its own (de)serialization so the JWT payload format is
defined in exactly one place.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

from auth.errors import ClaimsMalformed


@dataclass(frozen=True)
class Credential:
    """Stored login secret for one user, as read from the user store.

    The core only ever reads Credential records; it never writes them back.
    password_hash is a bcrypt digest (the "$2b$..." modular crypt string).
    """

    subject_id: str
    username: str
    password_hash: str


@dataclass(frozen=True)
class Profile:
    """Public identity data returned by GetProfile."""

    subject_id: str
    username: str


@dataclass(frozen=True)
class TokenClaims:
    """Signed claim set carried inside an access token.

    Payload keys:
      user_id  subject identifier (non-empty string)
      iat      issued-at, integer epoch seconds
      exp      expiry, integer epoch seconds
    """

    subject_id: str
    issued_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict:
        return {
            "user_id": self.subject_id,
            "iat": int(self.issued_at.timestamp()),
            "exp": int(self.expires_at.timestamp()),
        }

    @classmethod
    def from_payload(cls, payload: dict) -> TokenClaims:
        """Decode a verified JWT payload into TokenClaims.

        Strict: a missing or wrongly typed field raises ClaimsMalformed. There
        is no fallback to an empty subject or a default expiry.
        """
        subject_id = payload.get("user_id")
        if not isinstance(subject_id, str) or not subject_id:
            raise ClaimsMalformed()
        return cls(
            subject_id=subject_id,
            issued_at=_epoch_to_datetime(payload.get("iat")),
            expires_at=_epoch_to_datetime(payload.get("exp")),
        )


def _epoch_to_datetime(value) -> datetime:
    # bool is an int subclass; True is not a timestamp.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ClaimsMalformed()
    try:
        return datetime.fromtimestamp(value, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as exc:
        raise ClaimsMalformed() from exc
