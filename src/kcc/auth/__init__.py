# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication for the admin panel.

This package provides:
- Password hashing/verification (argon2, legacy bcrypt hashes accepted)
- Credential verification against the User table
- Database-resident sessions with lazy expiry
- Signed session cookies (itsdangerous)
"""
