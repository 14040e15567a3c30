#!/usr/bin/env python3
"""
Supplier API -- operator commands for identity records.

The HTTP API never grants permissions; an operator does it here, against the
same DATABASE_URL the server uses.

Usage:
  python manage.py grant-claim alice@example.com RemoveSupplier
  python manage.py grant-claim alice@example.com RemoveSupplier Remove
  python manage.py add-role alice@example.com Admin
  python manage.py unlock alice@example.com

A claim or role is copied into tokens issued after the change; the user has to
log in again to pick it up.
"""

import argparse
import logging
import sys
from typing import Optional

from sqlalchemy.exc import IntegrityError

from auth.store import UserStore
from core.config import get_settings

logger = logging.getLogger("suppliers.manage")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage.py", description="Manage supplier API users.")
    parser.add_argument("--database-url", help="Override DATABASE_URL from the environment.")
    sub = parser.add_subparsers(dest="command", required=True)

    grant = sub.add_parser("grant-claim", help="Attach a claim to a user.")
    grant.add_argument("email")
    grant.add_argument("claim_type")
    grant.add_argument("claim_value", nargs="?", default="")

    role = sub.add_parser("add-role", help="Put a user in a role.")
    role.add_argument("email")
    role.add_argument("role")

    unlock = sub.add_parser("unlock", help="End a lockout and reset the failed-login counter.")
    unlock.add_argument("email")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    store = UserStore(args.database_url or get_settings().database_url)
    try:
        user = store.get_by_email(args.email)
        if user is None:
            print(f"  [!] No user with email '{args.email}'.", file=sys.stderr)
            return 1

        if args.command == "grant-claim":
            if any(c.claim_type == args.claim_type for c in store.get_claims(user.id)):
                print(f"  '{user.email}' already has claim {args.claim_type}.")
                return 0
            store.add_claim(user.id, args.claim_type, args.claim_value)
            print(f"  Granted {args.claim_type} to '{user.email}'.")
        elif args.command == "add-role":
            try:
                store.add_role(user.id, args.role)
            except IntegrityError:
                print(f"  '{user.email}' is already in role {args.role}.")
                return 0
            print(f"  Added '{user.email}' to role {args.role}.")
        elif args.command == "unlock":
            store.set_lockout_end(user.id, None)
            print(f"  Unlocked '{user.email}'.")
        logger.info("%s applied to user id=%s", args.command, user.id)
        return 0
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
