"""
auth/errors.py -- Typed failure taxonomy for the authentication core.

Every failure the core can report is an AuthError subclass. Each class
carries three caller-safe attributes:

  code         machine-readable error code for the JSON error envelope
  status_code  HTTP status the transport layer maps the failure to
  message      generic human-readable text; never contains internal detail

Internal detail (database error text, signing errors) travels only through
exception chaining (`raise InternalError() from exc`) and server-side logs.
The api/ exception handler renders `code` and `message` and nothing else.

Credential failures are deliberately coarse: wrong username, wrong password
and corrupt stored hash all surface as InvalidCredentials so the caller
cannot enumerate users. Token failures are finer grained -- expiry is not a
secret, so TokenExpired is distinguishable from TokenInvalid.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for every failure raised by the authentication core."""

    code: str = "auth_error"
    status_code: int = 401
    message: str = "Authentication failed."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    code = "invalid_credentials"
    message = "Invalid username or password."


class TokenInvalid(AuthError):
    code = "token_invalid"
    message = "Invalid token."


class TokenExpired(AuthError):
    code = "token_expired"
    message = "Token has expired."


class ClaimsMalformed(AuthError):
    code = "claims_malformed"
    message = "Invalid token claims."


class MissingCredentialsSource(AuthError):
    """The request carried no authorization metadata at all."""

    code = "missing_credentials_source"
    message = "Missing authorization metadata."


class NoTokenSupplied(AuthError):
    """The authorization metadata was present but held no token value."""

    code = "no_token_supplied"
    message = "Authorization token not provided."


class ProfileNotFound(AuthError):
    """A valid token referenced a subject that no longer exists in the store.

    This is an administrative inconsistency rather than an auth failure, so
    it is kept apart from InvalidCredentials and the token errors.
    """

    code = "profile_not_found"
    status_code = 404
    message = "User profile not found."


class InternalError(AuthError):
    code = "internal_error"
    status_code = 500
    message = "An unexpected error occurred."
