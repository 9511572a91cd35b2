"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for Gatekeeper happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). JWT_SECRET is accepted as an alias for
      deployments that still export the older variable name.

  @model_validator(mode="after"): Runs after all fields are resolved and
      enforces the signing key policy. There is no dev-mode fallback: a
      process without a signing key must not serve requests.

Security notes:
  [K1] A missing SECRET_KEY is a hard startup failure.
  [K2] SECRET_KEY shorter than 32 chars is rejected. HS256 signing relies on
       key entropy -- a short key weakens every issued token.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("gatekeeper.config")

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'auth' / 'gatekeeper_auth.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Every field except secret_key has a default, so tests only need to export
    SECRET_KEY before the first get_settings() call.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Signing key
    # ------------------------------------------------------------------

    # Empty string is the sentinel for "not configured"; the validator below
    # raises, so callers never see "".
    secret_key: str = Field(default="", validation_alias=AliasChoices("SECRET_KEY", "JWT_SECRET"))

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=24 * 60 * 60, gt=0)
    bcrypt_rounds: int = Field(default=12, ge=4, le=31)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    database_url: str = _DEFAULT_DB_URL

    # ------------------------------------------------------------------
    # Server
    # ------------------------------------------------------------------

    host: str = "127.0.0.1"
    port: int = 3000
    cors_origins: list[str] = ["*"]
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Refuse to build Settings without a usable signing key [K1] [K2]."""
        if not self.secret_key:
            raise ValueError(
                "SECRET_KEY is required. " "Set SECRET_KEY (or JWT_SECRET) in your environment or .env file."
            )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
