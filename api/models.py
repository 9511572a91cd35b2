"""
API request and response models for Gatekeeper REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Every response body carries a success flag and a human-readable message, the
envelope existing browser clients already parse.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import PublicUser

EMAIL_MAX_LENGTH = 255
PASSWORD_MAX_LENGTH = 1024

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    """Request body for POST /api/login and POST /api/register.

    Both fields are optional at the schema level so a missing field reaches
    the route handler, which answers with the presence-check message instead
    of a generic validation error. The email cap matches the store column.
    """

    model_config = ConfigDict(extra="ignore")

    email: Optional[str] = Field(default=None, max_length=EMAIL_MAX_LENGTH)
    password: Optional[str] = Field(default=None, max_length=PASSWORD_MAX_LENGTH)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Outward user view. Never carries a password or hash."""

    id: str
    email: str

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserOut":
        return cls(id=user.id, email=user.email)


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    user: UserOut


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "User created successfully"
    user: UserOut


class MeResponse(BaseModel):
    success: bool = True
    user: UserOut


class HealthResponse(BaseModel):
    status: str = "OK"
    message: str = "Server is running"
