#!/usr/bin/env python
"""Create a local user account: python add_user.py EMAIL PASSWORD"""
import argparse
from datetime import timedelta

from taskmanager.config import Settings
from taskmanager.database import Database
from taskmanager.errors import ServiceError
from taskmanager.logging import configure_logging
from taskmanager.security import PasswordHasher, TokenIssuer
from taskmanager.services.auth import AuthService
from taskmanager.services.sessions import SessionManager


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("password")
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    configure_logging(settings.log_level, json_output=settings.log_json)

    database = Database(settings.database_url)
    # Create tables if not exist
    database.create_tables()

    auth = AuthService(
        hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
        tokens=TokenIssuer(
            settings.jwt_secret,
            timedelta(minutes=settings.access_token_expire_minutes),
            algorithm=settings.jwt_algorithm,
        ),
        sessions=SessionManager(settings.session_secret, timedelta(seconds=settings.session_max_age_seconds)),
    )

    with database.session() as db:
        try:
            result = auth.signup(db, args.email, args.password)
        except ServiceError as exc:
            print(exc.message)
            return 1
        # The CLI has no use for the session signup opened.
        auth.logout(db, result.session_id)

    print(f"User created: {result.user.email} ({result.user.id})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
