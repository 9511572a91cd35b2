"""
auth/tokens.py -- Password hashing and JWT issue/verify utilities.

Security design decisions:
  JWT: python-jose with HS256. Tokens carry sub (user id), iat, exp and a
       random jti nonce. The nonce guarantees two tokens issued for the same
       user differ even when both land in the same clock second. verify()
       raises TokenRejected with a reason so consumers can tell an expired
       session from a forged one.

  Passwords: bcrypt via the bcrypt package directly (no passlib wrapper).
       Input is pre-hashed with SHA-256 so length is not capped at 72 bytes.
       bcrypt embeds a random per-hash salt, and checkpw() compares full
       digests, so mismatch position does not show up in timing.

  Signing key: passed in explicitly by the caller (api/main.py reads it from
       core.config.get_settings()). This module never reads the environment
       and never logs the key.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt

_ALGORITHM = "HS256"
_DEFAULT_EXPIRE_SECONDS = 24 * 60 * 60

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


class PasswordHasher:
    """Salted one-way password hashing.

    rounds is the bcrypt cost factor (log2 of the iteration count). Tests pass
    the bcrypt minimum of 4; production uses Settings.bcrypt_rounds.

    bcrypt only reads 72 bytes of input and current releases refuse anything
    longer. Every password is first reduced to a base64 SHA-256 digest (44
    ASCII bytes, no NUL) so any length hashes and the whole password counts.
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    @staticmethod
    def _prehash(plain: str) -> bytes:
        return base64.b64encode(hashlib.sha256(plain.encode("utf-8", "surrogatepass")).digest())

    def hash(self, plain: str) -> str:
        """Return a bcrypt hash of the given plaintext password."""
        return bcrypt.hashpw(self._prehash(plain), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plain: str, hashed: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        A malformed or truncated hash is a mismatch, not an error.
        """
        try:
            return bcrypt.checkpw(self._prehash(plain), hashed.encode("utf-8"))
        except (ValueError, TypeError):
            return False


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


class TokenFailure(str, Enum):
    EXPIRED = "EXPIRED"
    BAD_SIGNATURE = "BAD_SIGNATURE"


class TokenRejected(Exception):
    """Raised by TokenIssuer.verify(). reason says why."""

    def __init__(self, reason: TokenFailure) -> None:
        super().__init__(reason.value)
        self.reason = reason


class TokenIssuer:
    """Issues and verifies signed access tokens.

    Usage:
        issuer = TokenIssuer(settings.secret_key)
        token = issuer.issue(user.id)
        user_id = issuer.verify(token)   # raises TokenRejected
    """

    def __init__(
        self,
        secret_key: str,
        expire_seconds: int = _DEFAULT_EXPIRE_SECONDS,
        algorithm: str = _ALGORITHM,
    ) -> None:
        if not secret_key:
            raise ValueError("TokenIssuer requires a non-empty signing key.")
        if expire_seconds <= 0:
            raise ValueError("expire_seconds must be positive.")
        self._secret_key = secret_key
        self.expire_seconds = expire_seconds
        self.algorithm = algorithm

    def __repr__(self) -> str:
        # Keep the key out of reprs, tracebacks and debug logs.
        return f"TokenIssuer(expire_seconds={self.expire_seconds}, algorithm={self.algorithm!r})"

    def issue(self, subject_id: str) -> str:
        """Encode a signed JWT for subject_id, valid for expire_seconds."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(subject_id),
            "iat": now,
            "exp": now + timedelta(seconds=self.expire_seconds),
            "jti": secrets.token_urlsafe(16),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def decode(self, token: str) -> dict:
        """Verify signature and expiry and return the full claims dict.

        Raises TokenRejected(EXPIRED) for a correctly signed but expired token
        and TokenRejected(BAD_SIGNATURE) for anything else that fails: wrong
        key, tampered payload, malformed string, missing subject.
        """
        try:
            claims = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError as exc:
            raise TokenRejected(TokenFailure.EXPIRED) from exc
        except JWTError as exc:
            raise TokenRejected(TokenFailure.BAD_SIGNATURE) from exc
        if not claims.get("sub"):
            raise TokenRejected(TokenFailure.BAD_SIGNATURE)
        return claims

    def verify(self, token: str) -> str:
        """Return the subject (user id) of a valid token."""
        return self.decode(token)["sub"]
