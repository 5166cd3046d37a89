# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from enum import Enum
from typing import Iterable


class Role(str, Enum):
    ADMIN = "ADMIN"
    AUTHOR = "AUTHOR"
    CLUB_REP = "CLUB_REP"

    @classmethod
    def parse(cls, value: str) -> "Role":
        """Parse a stored or user-supplied role name (case-insensitive)."""
        try:
            return cls((value or "").strip().upper())
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None


ALL_ROLES = frozenset(Role)


def is_allowed(role: Role, allowed_roles: Iterable[Role]) -> bool:
    """The only place role membership is decided."""
    return role in frozenset(allowed_roles)
