"""
api/routes/auth.py -- Login, registration and token introspection endpoints.

Routes:
  POST /api/login     -- email/password login; returns a bearer token
  POST /api/register  -- create a credential record
  GET  /api/me        -- identity behind a bearer token (requires auth)

These handlers are transport only. They check that both fields are present,
call the service parked on app.state, and map the returned outcome to a
status code. No authentication decision is made here.

Status mapping:
  Authenticated -> 200    Created -> 201
  EMAIL_NOT_FOUND / INVALID_PASSWORD -> 401
  USER_EXISTS -> 409      SERVER_ERROR -> 500
  Missing or empty email/password -> 400 (service not called)

Security:
  [M5] Cache-Control: no-store on every login response.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import Credentials, ErrorResponse, LoginResponse, MeResponse, RegisterResponse, UserOut
from auth.dependencies import get_current_user
from auth.models import Rejected, RejectReason, User
from auth.service import AuthenticationService, RegistrationService

MISSING_CREDENTIALS = "Email and password are required"
FIELD_TOO_LONG = "Email or password is too long"

_REJECTION_STATUS = {
    RejectReason.EMAIL_NOT_FOUND: 401,
    RejectReason.INVALID_PASSWORD: 401,
    RejectReason.USER_EXISTS: 409,
    RejectReason.SERVER_ERROR: 500,
}

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


def _has_credentials(body: Credentials) -> bool:
    return bool(body.email) and bool(body.password)


@router.post("/login", response_model=LoginResponse)
async def login(request: Request, body: Credentials) -> JSONResponse:
    """Authenticate with email and password and return an access token."""
    if not _has_credentials(body):
        resp = _error(400, MISSING_CREDENTIALS)
    else:
        service: AuthenticationService = request.app.state.auth_service
        outcome = await service.authenticate(body.email, body.password)
        if isinstance(outcome, Rejected):
            resp = _error(_REJECTION_STATUS[outcome.reason], outcome.message)
        else:
            resp = JSONResponse(
                status_code=200,
                content=LoginResponse(token=outcome.token, user=UserOut.from_public(outcome.user)).model_dump(),
            )
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(request: Request, body: Credentials) -> JSONResponse:
    """Create a user. 409 if the email is already registered."""
    if not _has_credentials(body):
        return _error(400, MISSING_CREDENTIALS)

    service: RegistrationService = request.app.state.registration_service
    outcome = await service.register(body.email, body.password)
    if isinstance(outcome, Rejected):
        return _error(_REJECTION_STATUS[outcome.reason], outcome.message)
    return JSONResponse(
        status_code=201,
        content=RegisterResponse(user=UserOut.from_public(outcome.user)).model_dump(),
    )


@router.get("/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return the user named by the bearer token."""
    return MeResponse(user=UserOut.from_public(current_user.public()))
