"""
api/main.py -- FastAPI application entry point for Gatekeeper.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- adds CORS headers and answers preflight requests
  2. log_requests    -- one access-log line per request

Lifespan builds every collaborator once (store, hasher, token issuer, the two
services) and parks them on app.state. Route handlers read them from there;
nothing in the request path reaches for module-level singletons. Tests swap
the lifespan for one that wires in-memory stores.

Settings are resolved at import time. A missing or short SECRET_KEY raises
ValueError here, so the process never starts serving without a signing key.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import FIELD_TOO_LONG, MISSING_CREDENTIALS
from api.routes.auth import router as auth_router
from auth.service import AuthenticationService, RegistrationService
from auth.store import UserStore
from auth.tokens import PasswordHasher, TokenIssuer
from core.config import get_settings

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("gatekeeper.api")

# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build the auth collaborators on startup and release the store on shutdown."""
    settings = get_settings()
    logger.info("Gatekeeper API starting up")

    app.state.user_store = UserStore(settings.database_url)
    hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_issuer = TokenIssuer(settings.secret_key, expire_seconds=settings.token_expire_seconds)
    app.state.auth_service = AuthenticationService(app.state.user_store, app.state.token_issuer, hasher)
    app.state.registration_service = RegistrationService(app.state.user_store, hasher)
    logger.info(
        "Auth initialized (token lifetime=%ds, bcrypt rounds=%d)",
        settings.token_expire_seconds,
        settings.bcrypt_rounds,
    )

    yield

    app.state.user_store.close()
    logger.info("Gatekeeper API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Gatekeeper API",
    description="Email/password authentication issuing signed, time-limited access tokens.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization"],
    max_age=3600,
)

# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    # Stays 500 if the handler raises; the catch-all handler answers with 500.
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    finally:
        ms = (time.perf_counter() - start) * 1000
        logger.info(
            "%s %s %d %.1fms %s",
            request.method,
            request.url.path,
            status_code,
            ms,
            request.client.host if request.client else "unknown",
        )


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])

# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {success, message} envelope as the routes so
# clients parse every error the same way.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 for request bodies the routes cannot use.

    An unparsable body gets its own message, as does a field over its length
    cap. Anything else (no body, a JSON array, non-string fields) means usable
    credentials were not supplied.
    """
    error_types = {err.get("type") for err in exc.errors()}
    if "json_invalid" in error_types:
        return _error(400, "Invalid JSON format")
    if "string_too_long" in error_types:
        return _error(400, FIELD_TOO_LONG)
    return _error(400, MISSING_CREDENTIALS)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Return the envelope for routing errors and HTTPExceptions raised by dependencies.

    Dependencies raise with detail already shaped as the envelope dict; use it
    directly rather than stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    if exc.status_code == 404:
        return _error(404, "Route not found")
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(message=str(exc.detail)).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The exception is logged with its traceback, never written to the response.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "Something went wrong!")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness."""
    return HealthResponse()
