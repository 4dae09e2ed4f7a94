"""
auth/coordinator.py -- AuthCoordinator: the Login and GetProfile sagas.

The coordinator composes the user store, CredentialVerifier and TokenManager.
It holds no per-request state; one instance serves every request
concurrently.

Failure policy:
  Every failure is raised as an AuthError subclass and is terminal for the
  request. There are no retries and no partial results -- a method either
  returns its value or raises.

  Login folds every way the lookup can go wrong (unknown user, store error,
  store timeout) into InvalidCredentials, and still spends one bcrypt check
  so timing does not reveal which case occurred [C1].

  GetProfile propagates token failures unchanged. A missing subject is
  ProfileNotFound; a store error is InternalError with the detail logged
  here and never returned.

Deadlines and cancellation:
  Store lookups are blocking SQLAlchemy calls. They run in the thread pool
  and are the only steps bounded by store_timeout. Cancelling the request
  task cancels the await on the store call; CancelledError is never caught
  here. Hashing runs in the thread pool without a deadline, and token
  signing/verification runs inline -- neither is meaningfully interruptible.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from auth.errors import InternalError, InvalidCredentials, MissingCredentialsSource, NoTokenSupplied, ProfileNotFound

if TYPE_CHECKING:
    from auth.models import Profile
    from auth.passwords import CredentialVerifier
    from auth.store import UserStore
    from auth.tokens import TokenManager

logger = logging.getLogger("authcore.auth")


class AuthCoordinator:
    """Request-handling core for login and token-to-profile resolution.

    Usage:
        coordinator = AuthCoordinator(store, CredentialVerifier(), tokens, store_timeout=5.0)
        token = await coordinator.login("alice", "correct-pw")
        profile = await coordinator.get_profile(token)
    """

    def __init__(
        self,
        store: UserStore,
        verifier: CredentialVerifier,
        tokens: TokenManager,
        store_timeout: float | None = None,
    ) -> None:
        self.store = store
        self.verifier = verifier
        self.tokens = tokens
        # None or 0 means no deadline on store lookups.
        self.store_timeout = store_timeout or None

    async def _lookup(self, func, *args):
        return await asyncio.wait_for(run_in_threadpool(func, *args), timeout=self.store_timeout)

    async def login(self, username: str, password: str) -> str:
        """Verify username/password and return a freshly issued access token.

        Raises InvalidCredentials for an unknown user, a wrong password, a
        corrupt stored hash or a failed lookup -- all indistinguishable.
        Raises InternalError if the token cannot be signed.
        """
        try:
            credential = await self._lookup(self.store.find_credential_by_username, username)
        except (SQLAlchemyError, asyncio.TimeoutError) as exc:
            logger.warning("Login failed for user %s: credential lookup error: %r", username, exc)
            credential = None

        if credential is None:
            # Equalize timing -- do NOT return early before running bcrypt [C1]
            await run_in_threadpool(self.verifier.verify_dummy, password)
            logger.info("Login failed for user %s", username)
            raise InvalidCredentials()

        try:
            await run_in_threadpool(self.verifier.verify, credential.password_hash, password)
        except InvalidCredentials:
            logger.info("Login failed for user %s", username)
            raise

        token = self.tokens.generate(credential.subject_id)
        logger.info("Issued token for subject %s", credential.subject_id)
        return token

    async def get_profile(self, token: str | None) -> Profile:
        """Resolve an access token to the Profile of its subject.

        token is the value taken from the request's authorization metadata
        by the transport layer: None when the request carried no such
        metadata at all, "" when it was present but empty.
        """
        if token is None:
            raise MissingCredentialsSource()
        if not token.strip():
            raise NoTokenSupplied()

        claims = self.tokens.verify(token)

        try:
            profile = await self._lookup(self.store.find_profile_by_subject_id, claims.subject_id)
        except (SQLAlchemyError, asyncio.TimeoutError) as exc:
            logger.error("Profile lookup failed for subject %s: %r", claims.subject_id, exc)
            raise InternalError() from exc

        if profile is None:
            logger.warning("Valid token references missing subject %s", claims.subject_id)
            raise ProfileNotFound()
        return profile
