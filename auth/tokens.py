"""
auth/tokens.py -- TokenManager: issue and verify signed, time-bound JWTs.

Security design decisions:
  JWT: python-jose with HS256. The algorithm list passed to jwt.decode() is
       pinned to HS256 so a token cannot downgrade itself to "none" or switch
       to an asymmetric algorithm keyed with our secret.

  Secret and lifetime are constructor arguments, not module globals. The
       application builds one TokenManager at startup from Settings and
       shares it read-only across requests; tests build their own with any
       secret and a fixed clock.

  Verification runs in a fixed order and returns claims only when every
       step passed:
         1. signature and structure  -> TokenInvalid
         2. strict claim decoding    -> ClaimsMalformed
         3. expiry against the clock -> TokenExpired
       python-jose's own exp check is disabled so expiry is judged against
       the injected clock, and so an expired token is only reported as such
       after its signature has verified.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from jose import JOSEError, JWTError, jwt

from auth.errors import InternalError, TokenExpired, TokenInvalid
from auth.models import TokenClaims

logger = logging.getLogger("authcore.auth")

_ALGORITHM = "HS256"

# iat/exp are validated by TokenClaims.from_payload and verify() instead.
_DECODE_OPTIONS = {
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenManager:
    """Issues and verifies access tokens with one secret and one lifetime."""

    def __init__(
        self,
        secret_key: str,
        validity: timedelta,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenManager requires a non-empty signing secret.")
        if validity <= timedelta(0):
            raise ValueError("Token validity must be a positive duration.")
        self._secret_key = secret_key
        self._validity = validity
        self._clock = clock

    @property
    def validity_seconds(self) -> int:
        return int(self._validity.total_seconds())

    def generate(self, subject_id: str) -> str:
        """Encode a signed JWT for subject_id, valid from now for the configured lifetime.

        Raises InternalError if signing fails, which only happens when the
        manager is misconfigured -- never because of the caller's input.
        """
        now = self._clock()
        claims = TokenClaims(subject_id=subject_id, issued_at=now, expires_at=now + self._validity)
        try:
            return jwt.encode(claims.to_payload(), self._secret_key, algorithm=_ALGORITHM)
        except JOSEError as exc:
            logger.error("Failed to sign token for subject %s: %s", subject_id, exc)
            raise InternalError() from exc

    def verify(self, token: str) -> TokenClaims:
        """Verify token and return its claims.

        Raises TokenInvalid (bad signature, wrong secret, tampered or
        unparseable token), ClaimsMalformed (signed payload missing or
        mistyping user_id/iat/exp) or TokenExpired (valid signature, expiry
        not in the future).
        """
        try:
            payload = jwt.decode(token, self._secret_key, algorithms=[_ALGORITHM], options=_DECODE_OPTIONS)
        except JWTError as exc:
            raise TokenInvalid() from exc
        claims = TokenClaims.from_payload(payload)
        if claims.expires_at <= self._clock():
            raise TokenExpired()
        return claims
