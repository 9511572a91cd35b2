"""
auth/models.py -- Domain dataclasses for authentication entities and outcomes.

Pattern: Data class (pure data container, almost no logic). Stores and
services do the work; these types only carry shape.

Outcome types are a tagged union: a service returns exactly one of
Authenticated, Created or Rejected. Route handlers dispatch on the type,
so a token and a rejection reason can never appear together.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class User:
    """A stored credential record.

    id and created_at are assigned by UserStore.insert_unique(); a User built
    for insertion leaves them as None. hashed_password is a bcrypt hash and
    must never leave the auth package -- use public() for anything outward.
    """

    email: str
    hashed_password: str
    id: str | None = None
    created_at: str | None = None

    def public(self) -> PublicUser:
        if self.id is None:
            raise ValueError("User has no id; only stored users have a public form")
        return PublicUser(id=self.id, email=self.email)


@dataclass(frozen=True)
class PublicUser:
    """User representation safe to return to callers. Has no secret fields."""

    id: str
    email: str


class RejectReason(str, Enum):
    EMAIL_NOT_FOUND = "EMAIL_NOT_FOUND"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    USER_EXISTS = "USER_EXISTS"
    SERVER_ERROR = "SERVER_ERROR"


@dataclass(frozen=True)
class Authenticated:
    token: str
    user: PublicUser


@dataclass(frozen=True)
class Created:
    user: PublicUser


@dataclass(frozen=True)
class Rejected:
    """A business rejection or a folded infrastructure failure.

    message is the client-facing text. It never contains exception detail.
    """

    reason: RejectReason
    message: str


AuthOutcome = Authenticated | Rejected
RegOutcome = Created | Rejected
