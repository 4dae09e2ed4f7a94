"""
auth/dependencies.py -- FastAPI Depends() helpers and bearer-token extraction.

The authentication core takes a bare token string. Getting from an HTTP
request to that string is a transport concern and lives here:

  extract_bearer_token()  -- pure function, the one place the "Bearer "
                             scheme prefix is handled
  get_token()             -- Depends() helper reading the Authorization header
  get_coordinator()       -- Depends() helper returning the shared coordinator

Bearer handling rules (extract_bearer_token):
  None                      -> None   (no authorization metadata at all)
  "Bearer <token>"          -> "<token>" (scheme matched case-insensitively)
  "Bearer" / "Bearer   "    -> ""     (scheme with no token)
  anything else             -> the raw value, stripped of surrounding space

Raw values pass through unchanged so clients that send the bare token keep
working.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request

if TYPE_CHECKING:
    from auth.coordinator import AuthCoordinator

_BEARER_SCHEME = "bearer"


def extract_bearer_token(value: str | None) -> str | None:
    """Return the token carried by an authorization value (see module docstring)."""
    if value is None:
        return None
    value = value.strip()
    scheme, _, rest = value.partition(" ")
    if scheme.lower() == _BEARER_SCHEME:
        return rest.strip()
    return value


def get_token(request: Request) -> str | None:
    """Return the token from the Authorization header, or None if the header is absent.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(token: str | None = Depends(get_token)): ...
    """
    return extract_bearer_token(request.headers.get("authorization"))


def get_coordinator(request: Request) -> AuthCoordinator:
    """Return the AuthCoordinator built by the application lifespan."""
    return request.app.state.coordinator
