# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import yaml
from sqlalchemy import select

from kcc.auth.passwords import hash_password, verify_password
from kcc.auth.roles import Role
from kcc.errors import InvalidCredentials
from kcc.infra.db import Database
from kcc.infra.models import User

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[3]
DEFAULT_USERS_PATH = Path(
    os.getenv("KCC_USERS_PATH", str(BASE_DIR / "data" / "users.yml"))
).resolve()

# Verified against when the email is unknown so both failure paths cost the same.
_DUMMY_HASH: Optional[str] = None


def _dummy_hash() -> str:
    global _DUMMY_HASH
    if _DUMMY_HASH is None:
        _DUMMY_HASH = hash_password("kcc-unknown-user")
    return _DUMMY_HASH


@dataclass(frozen=True)
class AuthUser:
    id: int
    full_name: str
    email: str
    role: Role
    club_id: Optional[int]


def to_auth_user(row: User) -> AuthUser:
    return AuthUser(
        id=row.id,
        full_name=row.full_name,
        email=row.email,
        role=Role.parse(row.role),
        club_id=row.club_id,
    )


class CredentialVerifier:
    """Checks an email/password pair against the User table. Read-only."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def verify(self, email: str, password: str) -> int:
        """Return the id of the user identified by (email, password).

        Raises InvalidCredentials for an empty field, an unknown email or a
        wrong password, without saying which. StorageError propagates.
        """
        if not email or not password:
            raise InvalidCredentials()

        with self.db.session() as s:
            row = s.execute(
                select(User.id, User.password_hash).where(User.email == email).limit(1)
            ).first()

        if row is None:
            verify_password(_dummy_hash(), password)
            logger.info("Login rejected: unknown email")
            raise InvalidCredentials()

        if not verify_password(row.password_hash, password):
            logger.info("Login rejected: bad password for user %s", row.id)
            raise InvalidCredentials()

        return row.id


def get_user_by_email(db: Database, email: str) -> Optional[AuthUser]:
    with db.session() as s:
        row = s.scalars(select(User).where(User.email == email).limit(1)).first()
        return to_auth_user(row) if row else None


def create_user(
    db: Database,
    *,
    full_name: str,
    email: str,
    password: str,
    role: Role,
    club_id: Optional[int] = None,
) -> AuthUser:
    """Insert a user. Users are provisioned out-of-band (scripts, YAML import)."""
    email = (email or "").strip()
    if not email:
        raise ValueError("Email is required")
    if not (full_name or "").strip():
        raise ValueError("Full name is required")

    row = User(
        full_name=full_name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=Role(role).value,
        club_id=club_id,
    )
    with db.session() as s:
        if s.scalars(select(User.id).where(User.email == email)).first() is not None:
            raise ValueError(f"A user with email {email!r} already exists")
        s.add(row)
        s.flush()
        user = to_auth_user(row)
    logger.info("Created user %s with role %s", user.id, user.role.value)
    return user


def _load_users_file(path: Path) -> Dict[str, dict]:
    if not path.exists():
        return {}
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
    out: Dict[str, dict] = {}
    for key, udata in users.items():
        if not isinstance(udata, dict):
            continue
        email = str(key).strip()
        if not email:
            continue
        out[email] = udata
    return out


def import_users_file(db: Database, path: Path = DEFAULT_USERS_PATH) -> int:
    """Upsert users from a YAML file keyed by email. Returns the number written.

    Each entry carries `full_name`, `role`, optional `club_id`, and either a
    ready `password_hash` or a plain `password` to hash.
    """
    entries = _load_users_file(path)
    written = 0
    with db.session() as s:
        for email, udata in entries.items():
            ph = str(udata.get("password_hash") or "").strip()
            if not ph:
                plain = str(udata.get("password") or "")
                if not plain:
                    logger.warning("Skipping %s in %s: no password or password_hash", email, path)
                    continue
                ph = hash_password(plain)

            role = Role.parse(str(udata.get("role") or Role.AUTHOR.value))
            club_id = udata.get("club_id")
            full_name = str(udata.get("full_name") or email).strip()

            row = s.scalars(select(User).where(User.email == email)).first()
            if row is None:
                row = User(email=email)
                s.add(row)
            row.full_name = full_name
            row.password_hash = ph
            row.role = role.value
            row.club_id = int(club_id) if club_id is not None else None
            written += 1
    logger.info("Imported %d users from %s", written, path)
    return written
