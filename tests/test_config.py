"""Unit tests for core/config.py -- Settings validation.

Covers:
- Missing SECRET_KEY refuses to build Settings (startup is fatal)
- Short SECRET_KEY rejected
- JWT_SECRET accepted as an alias
- Defaults: 24h token lifetime, bcrypt cost 12
"""

import pytest

from core.config import Settings

GOOD_KEY = "k" * 32


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in ("SECRET_KEY", "JWT_SECRET", "BCRYPT_ROUNDS", "TOKEN_EXPIRE_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_missing_secret_key_is_fatal(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValueError, match="SECRET_KEY is required"):
        Settings(_env_file=None)


def test_short_secret_key_rejected(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SECRET_KEY", "too-short")
    with pytest.raises(ValueError, match="at least 32 characters"):
        Settings(_env_file=None)


def test_secret_key_from_env(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SECRET_KEY", GOOD_KEY)
    assert Settings(_env_file=None).secret_key == GOOD_KEY


def test_jwt_secret_alias(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("JWT_SECRET", GOOD_KEY)
    assert Settings(_env_file=None).secret_key == GOOD_KEY


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SECRET_KEY", GOOD_KEY)
    settings = Settings(_env_file=None)
    assert settings.token_expire_seconds == 24 * 60 * 60
    assert settings.bcrypt_rounds == 12
    assert settings.cors_origins == ["*"]
    assert settings.database_url.startswith("sqlite:///")


def test_bcrypt_rounds_below_minimum_rejected(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("SECRET_KEY", GOOD_KEY)
    clean_env.setenv("BCRYPT_ROUNDS", "3")
    with pytest.raises(ValueError):
        Settings(_env_file=None)
