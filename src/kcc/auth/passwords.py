# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import bcrypt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

_PH = PasswordHasher()

# Hashes created by the previous site (bcryptjs).
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
# bcryptjs only ever hashed the first 72 bytes of a password.
_BCRYPT_MAX_BYTES = 72


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    return _PH.hash(plain)


def is_legacy_hash(hash_value: str) -> bool:
    return (hash_value or "").startswith(_BCRYPT_PREFIXES)


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    if is_legacy_hash(hash_value):
        try:
            return bcrypt.checkpw(
                plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], hash_value.encode("utf-8")
            )
        except ValueError:
            return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerificationError, InvalidHashError):
        return False