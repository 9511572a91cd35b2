"""
auth/service.py -- Authentication and registration orchestration.

Both services are constructed explicitly with their collaborators (store,
hasher, token issuer) and hold no other state. api/main.py builds one of each
in the lifespan; tests build them around in-memory stores.

Error contract:
  authenticate() and register() never raise. Every path returns an outcome
  from auth.models. Business rejections (unknown email, wrong password,
  duplicate email) are expected results and logged at INFO. Anything else
  that goes wrong is folded into SERVER_ERROR; the exception is logged with
  its traceback for operators and never copied into the outcome.

Ordering:
  authenticate() checks the email before touching the password. An unknown
  email returns EMAIL_NOT_FOUND without running bcrypt.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from auth.models import (
    Authenticated,
    AuthOutcome,
    Created,
    RegOutcome,
    Rejected,
    RejectReason,
    User,
)
from auth.store import EmailAlreadyExists
from auth.tokens import PasswordHasher

if TYPE_CHECKING:
    from auth.store import UserStore
    from auth.tokens import TokenIssuer

logger = logging.getLogger("gatekeeper.auth")

EMAIL_NOT_FOUND = Rejected(RejectReason.EMAIL_NOT_FOUND, "Email not found")
INVALID_PASSWORD = Rejected(RejectReason.INVALID_PASSWORD, "Invalid password")
USER_EXISTS = Rejected(RejectReason.USER_EXISTS, "User already exists")
LOGIN_FAILED = Rejected(RejectReason.SERVER_ERROR, "Internal server error")
REGISTRATION_FAILED = Rejected(RejectReason.SERVER_ERROR, "Failed to create user")


class AuthenticationService:
    """Verifies an email/password pair and issues an access token."""

    def __init__(self, store: UserStore, issuer: TokenIssuer, hasher: PasswordHasher | None = None) -> None:
        self.store = store
        self.issuer = issuer
        self.hasher = hasher or PasswordHasher()

    async def authenticate(self, email: str, password: str) -> AuthOutcome:
        try:
            user = await self.store.find_by_email(email)
            if user is None:
                logger.info("Login rejected: unknown email")
                return EMAIL_NOT_FOUND

            # bcrypt is CPU-bound; keep it off the event loop.
            matches = await asyncio.to_thread(self.hasher.verify, password, user.hashed_password)
            if not matches:
                logger.info("Login rejected: bad password for user %s", user.id)
                return INVALID_PASSWORD

            token = self.issuer.issue(user.id)
        except Exception:
            logger.exception("Login failed with an internal error")
            return LOGIN_FAILED

        logger.info("Login: user %s", user.id)
        return Authenticated(token=token, user=user.public())


class RegistrationService:
    """Creates a credential record for an unused email."""

    def __init__(self, store: UserStore, hasher: PasswordHasher | None = None) -> None:
        self.store = store
        self.hasher = hasher or PasswordHasher()

    async def register(self, email: str, password: str) -> RegOutcome:
        try:
            # Fast path for the common duplicate; the UNIQUE constraint below
            # still decides races.
            if await self.store.find_by_email(email) is not None:
                logger.info("Registration rejected: email already in use")
                return USER_EXISTS

            hashed = await asyncio.to_thread(self.hasher.hash, password)
            user = await self.store.insert_unique(User(email=email, hashed_password=hashed))
        except EmailAlreadyExists:
            logger.info("Registration rejected: email taken by a concurrent request")
            return USER_EXISTS
        except Exception:
            logger.exception("Registration failed with an internal error")
            return REGISTRATION_FAILED

        logger.info("Registered user %s", user.id)
        return Created(user=user.public())
