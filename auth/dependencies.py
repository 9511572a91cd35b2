"""
auth/dependencies.py -- FastAPI Depends() helpers for token-protected routes.

get_current_user() reads "Authorization: Bearer <token>", verifies it with
the TokenIssuer parked on app.state, and loads the user it names. Expired
and forged tokens produce different 401 messages so clients know whether
to log in again or stop retrying.

Layer rule: no imports from api/ or core/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenFailure, TokenIssuer, TokenRejected

_FAILURE_MESSAGES = {
    TokenFailure.EXPIRED: "Token expired",
    TokenFailure.BAD_SIGNATURE: "Invalid token",
}


def _unauthorized(message: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"success": False, "message": message},
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(request: Request) -> User:
    """Require a valid bearer token. Raises HTTP 401 otherwise.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(user: User = Depends(get_current_user)): ...
    """
    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        raise _unauthorized("Authentication required")
    token = auth_header[7:].strip()

    issuer: TokenIssuer = request.app.state.token_issuer
    try:
        user_id = issuer.verify(token)
    except TokenRejected as exc:
        raise _unauthorized(_FAILURE_MESSAGES[exc.reason]) from exc

    user_store: UserStore = request.app.state.user_store
    user = await user_store.find_by_id(user_id)
    if user is None:
        # Signed by us, but the record is gone.
        raise _unauthorized("Invalid token")
    return user
