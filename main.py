#!/usr/bin/env python3
"""
Gatekeeper: email/password authentication service.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 8080
  python main.py create-user alice@example.com

Environment variables:
  SECRET_KEY    Required. Token signing key, at least 32 characters.
                JWT_SECRET is accepted as an alias.
  DATABASE_URL  SQLAlchemy URL for the credential store
                (default: SQLite file next to the auth package).
"""

import argparse
import asyncio
from getpass import getpass
from typing import Optional

from auth.models import Rejected
from auth.service import RegistrationService
from auth.store import UserStore
from auth.tokens import PasswordHasher
from core.config import Settings, get_settings


def _serve(settings: Settings, host: Optional[str], port: Optional[int]) -> None:
    import uvicorn

    uvicorn.run(
        "asgi:app",
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


def _prompt_for_password() -> Optional[str]:
    for _ in range(3):
        password = getpass("Password: ")
        if not password:
            print("Password must not be empty. Please try again.")
            continue
        confirmation = getpass("Confirm password: ")
        if password != confirmation:
            print("Passwords do not match. Please try again.")
            continue
        return password
    return None


def create_user(settings: Settings, email: str, password: str) -> int:
    """Register one user through RegistrationService. Returns a process exit code."""
    store = UserStore(settings.database_url)
    try:
        service = RegistrationService(store, PasswordHasher(rounds=settings.bcrypt_rounds))
        outcome = asyncio.run(service.register(email, password))
    finally:
        store.close()

    if isinstance(outcome, Rejected):
        print(f"  [!] {outcome.message}")
        return 1
    print(f"Created user {outcome.user.id}: {outcome.user.email}")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Gatekeeper: email/password authentication service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting, 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting, 3000)")

    add = sub.add_parser("create-user", help="Register a user from the command line")
    add.add_argument("email", help="Email address, stored exactly as given")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    # Fails fast without SECRET_KEY, before any socket is opened.
    settings = get_settings()

    if args.command == "serve":
        _serve(settings, args.host, args.port)
        return 0

    password = _prompt_for_password()
    if password is None:
        print("Aborted creating user.")
        return 1
    return create_user(settings, args.email, password)


if __name__ == "__main__":
    raise SystemExit(main())
