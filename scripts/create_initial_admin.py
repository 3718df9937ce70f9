"""Utility script to create an initial administrator account."""

from __future__ import annotations

import argparse
from getpass import getpass

from sqlalchemy.exc import SQLAlchemyError

from clearlot.application.use_cases.accounts import create_account
from clearlot.infrastructure.database import SessionLocal, initialize_database


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for account creation."""

    parser = argparse.ArgumentParser(
        description="Create an initial administrator for the ClearLot API.",
    )
    parser.add_argument(
        "--email",
        default="admin@clearlot.com",
        help="E-mail used to sign in (default: admin@clearlot.com)",
    )
    parser.add_argument(
        "--company",
        default="Clearlot Platform",
        help="Company shown for the account (default: Clearlot Platform)",
    )
    parser.add_argument("--name", default=None, help="Contact name (optional)")
    parser.add_argument(
        "--password",
        default=None,
        help="Account password. Prompted interactively when omitted.",
    )
    parser.add_argument(
        "--no-admin",
        action="store_true",
        help="Create a regular marketplace account instead of an administrator.",
    )
    return parser.parse_args()


def main() -> None:
    """Create an account using the provided command line arguments."""

    args = parse_args()

    password = args.password or getpass("Password: ")
    if not password:
        raise SystemExit("No password provided.")

    initialize_database()

    session = SessionLocal()
    try:
        account = create_account(
            session,
            email=args.email,
            password=password,
            company=args.company,
            name=args.name,
            is_admin=not args.no_admin,
        )
    except ValueError as exc:
        session.rollback()
        raise SystemExit(f"Could not create the account: {exc}") from exc
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not save the account: {exc}") from exc
    else:
        print(
            "Account created:\n"
            f"  ID: {account.id}\n"
            f"  Company: {account.company}\n"
            f"  Email: {account.email}\n"
            f"  Administrator: {'yes' if account.is_admin else 'no'}"
        )
    finally:
        session.close()


if __name__ == "__main__":
    main()
