"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/login    -- password login; returns a bearer access token
  GET  /api/v1/auth/profile  -- resolve the caller's token to a user profile

Both handlers are thin: they unpack the request, await the AuthCoordinator
and shape the response. Failures are AuthError exceptions raised by the
coordinator; api/main.py turns them into the JSON error envelope, so no
handler builds an error response itself.

Security:
  [C1] Login goes through AuthCoordinator.login(), which includes timing
       equalization -- never inline a store lookup + password check here.
  [M5] Cache-Control: no-store on login responses.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.models import ErrorResponse, LoginRequest, LoginResponse, ProfileResponse
from auth.coordinator import AuthCoordinator
from auth.dependencies import get_coordinator, get_token

# Auth policy:
# - POST /api/v1/auth/login:   public -- login endpoint must be unauthenticated
# - GET  /api/v1/auth/profile: requires a valid bearer token in Authorization
router = APIRouter()

_ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Authentication failed"},
    500: {"model": ErrorResponse, "description": "Internal error"},
}


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    responses={**_ERROR_RESPONSES, 422: {"model": ErrorResponse, "description": "Malformed request body"}},
)
async def login(
    body: LoginRequest,
    coordinator: AuthCoordinator = Depends(get_coordinator),
) -> JSONResponse:
    """Authenticate with username and password; return a signed access token.

    Returns the same generic error for wrong username and wrong password
    ("invalid_credentials") to avoid leaking username existence information.

    A body that fails LoginRequest validation (missing field, empty username,
    username or password over 255 characters) is rejected with 422
    "validation_error" before the coordinator runs. That outcome depends only
    on the shape of the request, never on which accounts exist.
    """
    token = await coordinator.login(body.username, body.password)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=coordinator.tokens.validity_seconds,
        ).model_dump(),
    )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.get(
    "/auth/profile",
    response_model=ProfileResponse,
    responses={**_ERROR_RESPONSES, 404: {"model": ErrorResponse, "description": "Subject no longer exists"}},
)
async def profile(
    token: str | None = Depends(get_token),
    coordinator: AuthCoordinator = Depends(get_coordinator),
) -> ProfileResponse:
    """Return the profile of the user identified by the bearer token."""
    user = await coordinator.get_profile(token)
    return ProfileResponse(user_id=user.subject_id, username=user.username)
