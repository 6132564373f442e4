#!/usr/bin/env python3
"""
Bootstrap an administrator directly in the database.

Every other administrator is created through the guarded API by an existing
administrator, so the first one has to come from here. The account is
created already confirmed and has no creator.

Usage:
    python scripts/create_admin.py --name "Ann" --email ann@example.com
    python scripts/create_admin.py --name "Ann" --email ann@example.com --password secret123

Options:
    --password   Read from a prompt when omitted
    --phone      Optional phone number
"""

import sys
import argparse
import getpass
import logging
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pydantic import ValidationError as PydanticValidationError

from backend.auth import ADMIN_TABLE, CredentialStore, PasswordHasher, validate_password_length
from backend.schemas import CreateAdminRequest
from config.settings import get_settings
from core import schema
from core.db import DatabaseManager
from core.errors import DuplicateEmailError

logger = logging.getLogger("scripts.create_admin")


def bootstrap_admin(settings, name: str, email: str, password: str, phone: str | None = None) -> dict:
    """Create a confirmed administrator and return its record.

    Input goes through the same request schema as POST /api/admins.

    Raises:
        ValueError: invalid name, email or phone, or password outside the
            admin length policy
        DuplicateEmailError: an administrator already has this email
    """
    try:
        body = CreateAdminRequest.model_validate(
            {"name": name, "email": email, "password": password, "phone": phone}
        )
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValueError(problems) from e

    ok, message = validate_password_length(
        body.password,
        settings.auth.admin_password_min_length,
        settings.auth.password_max_length,
    )
    if not ok:
        raise ValueError(message)

    db = DatabaseManager.from_settings(settings.database)
    try:
        schema.initialize(db)
        store = CredentialStore(db, ADMIN_TABLE, PasswordHasher(rounds=settings.auth.bcrypt_rounds))
        admin = store.create({"name": body.name, "email": body.email, "phone": body.phone}, body.password)
        return store.mark_email_confirmed(admin["id"])
    finally:
        db.close()


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create a confirmed administrator")
    parser.add_argument("--name", required=True, help="Display name (max 30 characters)")
    parser.add_argument("--email", required=True, help="Login email")
    parser.add_argument("--password", help="Password (prompted when omitted)")
    parser.add_argument("--phone", help="Phone number")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    password = args.password or getpass.getpass("Password: ")

    try:
        admin = bootstrap_admin(get_settings(), args.name, args.email, password, args.phone)
    except ValueError as e:
        logger.error(str(e))
        return 1
    except DuplicateEmailError:
        logger.error(f"An administrator with email {args.email} already exists")
        return 1

    logger.info(f"Administrator {admin['email']} created with id {admin['id']}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
