#!/usr/bin/env python3
"""Create an admin account.

Usage:
    python scripts/create_admin.py --email admin@example.com --full-name "Shop Admin"

The password is read from ADMIN_PASSWORD, or prompted for when unset.
JWT_SECRET and DATABASE_URL are read the same way the API reads them.
"""
import argparse
import asyncio
import getpass
import os
import sys
from pathlib import Path

# Allow running from a checkout without installing
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from core.config import AuthConfig, settings  # noqa: E402
from core.database import SessionLocal, engine, init_db  # noqa: E402
from core.exceptions import DuplicateEmail  # noqa: E402
from schemas.auth_schemas import validate_password_policy  # noqa: E402
from repositories.token_store import SqlAlchemyTokenStore  # noqa: E402
from repositories.user_store import SqlAlchemyUserStore  # noqa: E402
from services.auth_service import AuthService  # noqa: E402
from services.token_service import TokenService  # noqa: E402


async def create_admin(email: str, password: str, full_name: str) -> int:
    config = AuthConfig.from_settings(settings)
    await init_db()

    try:
        async with SessionLocal() as session:
            user_store = SqlAlchemyUserStore(session)
            token_service = TokenService(config, SqlAlchemyTokenStore(session), user_store)
            auth_service = AuthService(config, user_store, token_service)
            try:
                result = await auth_service.register(email, password, full_name, role="admin")
            except DuplicateEmail:
                print(f"User {email} already exists", file=sys.stderr)
                return 1

            # The bootstrap login is not needed; drop its session
            await token_service.revoke_all(result["user"].id)
    finally:
        await engine.dispose()

    print(f"Created admin {email} (id: {result['user'].id})")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--email", required=True)
    parser.add_argument("--full-name", default="Administrator")
    args = parser.parse_args(argv)

    password = os.environ.get("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    try:
        validate_password_policy(password)
    except ValueError as exc:
        parser.error(str(exc))

    return asyncio.run(create_admin(args.email, password, args.full_name))


if __name__ == "__main__":
    sys.exit(main())
