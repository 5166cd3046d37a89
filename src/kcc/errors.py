# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exception types shared by the auth core and the web layer."""

from __future__ import annotations


class KccError(Exception):
    """Base class for application errors."""


class InvalidCredentials(KccError):
    """Email/password pair does not identify a user.

    Raised for an unknown email and for a wrong password alike, so callers
    cannot tell the two apart.
    """

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class StorageError(KccError):
    """The persistence backend failed. The message never carries backend details."""

    def __init__(self, message: str = "Storage backend failure") -> None:
        super().__init__(message)
