# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Session cookie transport.

The cookie value is the database session id signed with itsdangerous, so a
client cannot forge an id. Whether the id is still a live session is decided
by `SessionStore.resolve`, never by the signature alone.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer
from starlette.responses import Response

logger = logging.getLogger(__name__)

SESSION_TTL = timedelta(days=7)
DEFAULT_COOKIE_NAME = "kcc_session"
DEFAULT_SALT = "kcc.session.v1"
DEV_SECRET = "dev-secret"

_TRUTHY = {"1", "true", "yes", "y"}


def is_production() -> bool:
    return os.getenv("KCC_ENV", "development").strip().lower() == "production"


def _secret_from_env() -> str:
    secret = os.getenv("KCC_SECRET_KEY")
    if secret:
        return secret
    if is_production():
        raise RuntimeError("KCC_SECRET_KEY must be set when KCC_ENV=production")
    logger.warning("KCC_SECRET_KEY not set, signing session cookies with the development secret")
    return DEV_SECRET


@dataclass(frozen=True)
class SessionCookie:
    secret: str
    name: str = DEFAULT_COOKIE_NAME
    salt: str = DEFAULT_SALT
    secure: bool = False
    max_age: int = int(SESSION_TTL.total_seconds())

    @classmethod
    def from_env(cls) -> "SessionCookie":
        secure_flag = os.getenv("KCC_COOKIE_SECURE", "").strip().lower()
        return cls(
            secret=_secret_from_env(),
            name=os.getenv("KCC_COOKIE_NAME", DEFAULT_COOKIE_NAME),
            salt=os.getenv("KCC_SESSION_SALT", DEFAULT_SALT),
            secure=is_production() or secure_flag in _TRUTHY,
        )

    def _serializer(self) -> URLSafeTimedSerializer:
        return URLSafeTimedSerializer(secret_key=self.secret, salt=self.salt)

    def dumps(self, session_id: str) -> str:
        return self._serializer().dumps(session_id)

    def loads(self, value: Optional[str]) -> Optional[str]:
        """Return the session id carried by a cookie value, or None if unusable."""
        if not value:
            return None
        try:
            data = self._serializer().loads(value, max_age=self.max_age)
        except BadSignature:
            return None
        if not isinstance(data, str) or not data:
            return None
        return data

    def settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.secure, "path": "/"}

    def set_on(self, response: Response, session_id: str) -> None:
        response.set_cookie(self.name, self.dumps(session_id), max_age=self.max_age, **self.settings())

    def clear_on(self, response: Response) -> None:
        response.set_cookie(self.name, "", max_age=0, expires=0, **self.settings())
