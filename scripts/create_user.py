#!/usr/bin/env python3
from __future__ import annotations

import argparse
from getpass import getpass
from pathlib import Path

from kcc.auth.roles import Role
from kcc.auth.users import DEFAULT_USERS_PATH, create_user, import_users_file
from kcc.core.logging_config import configure_logging
from kcc.infra.db import Database


def main() -> None:
    parser = argparse.ArgumentParser(description="Provision admin panel users.")
    parser.add_argument(
        "--from-file",
        nargs="?",
        const=str(DEFAULT_USERS_PATH),
        help="Import users from a YAML file instead of prompting (default: data/users.yml)",
    )
    args = parser.parse_args()

    configure_logging()
    db = Database()
    db.create_all()

    if args.from_file:
        n = import_users_file(db, Path(args.from_file))
        print(f"OK -> {n} users from {args.from_file}")
        return

    full_name = input("Full name: ").strip()
    email = input("Email: ").strip()
    role_in = input("Role [ADMIN/AUTHOR/CLUB_REP]: ").strip() or Role.AUTHOR.value
    role = Role.parse(role_in)
    club_id = None
    if role is Role.CLUB_REP:
        club_in = input("Club id: ").strip()
        club_id = int(club_in) if club_in else None

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    user = create_user(db, full_name=full_name, email=email, password=pw1, role=role, club_id=club_id)
    print(f"OK -> user {user.id} ({user.email}, {user.role.value})")


if __name__ == "__main__":
    main()
