# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Database-resident login sessions.

Expiry is lazy: `resolve` ignores rows whose expiry has passed, it does not
delete them. Expired rows stay until `destroy` or `purge_expired` removes them.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from sqlalchemy import delete, select

from kcc.auth.session import SESSION_TTL
from kcc.auth.users import AuthUser, to_auth_user
from kcc.infra.db import Database
from kcc.infra.models import Session, User

logger = logging.getLogger(__name__)

# 32 random bytes, url-safe encoded (43 chars)
TOKEN_BYTES = 32


def utcnow() -> datetime:
    """Naive UTC timestamp, as stored in the expiresAt column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class SessionStore:
    def __init__(
        self,
        db: Database,
        *,
        ttl: timedelta = SESSION_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.ttl = ttl
        self.clock = clock

    def create(self, user_id: int) -> str:
        """Persist a new session for `user_id` and return its opaque token.

        Not idempotent: every call yields an independent session.
        """
        token = secrets.token_urlsafe(TOKEN_BYTES)
        expires_at = self.clock() + self.ttl
        with self.db.session() as s:
            s.add(Session(id=token, user_id=user_id, expires_at=expires_at))
        logger.info("Session created for user %s (expires %s)", user_id, expires_at.isoformat())
        return token

    def resolve(self, token: Optional[str]) -> Optional[AuthUser]:
        """Return the owner of a live session, or None for unknown/expired tokens."""
        if not token:
            return None
        stmt = (
            select(User)
            .join(Session, Session.user_id == User.id)
            .where(Session.id == token, Session.expires_at > self.clock())
            .limit(1)
        )
        with self.db.session() as s:
            row = s.scalars(stmt).first()
            return to_auth_user(row) if row else None

    def destroy(self, token: Optional[str]) -> None:
        """Delete a session. Unknown tokens are a no-op."""
        if not token:
            return
        with self.db.session() as s:
            s.execute(delete(Session).where(Session.id == token))

    def purge_expired(self) -> int:
        """Delete every expired session row. Returns the number removed."""
        with self.db.session() as s:
            result = s.execute(delete(Session).where(Session.expires_at <= self.clock()))
            removed = result.rowcount or 0
        logger.info("Purged %d expired sessions", removed)
        return removed
