# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Union
from urllib.parse import quote

from fastapi import HTTPException, Request
from fastapi.responses import RedirectResponse

from kcc.auth.roles import Role, is_allowed
from kcc.auth.session import SessionCookie
from kcc.auth.store import SessionStore
from kcc.auth.users import AuthUser

logger = logging.getLogger(__name__)

LOGIN_PATH = "/login"
HOME_PATH = "/"
ADMIN_HOME_PATH = "/admin"


class FailureKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class AuthFailure:
    kind: FailureKind
    location: str


AuthOutcome = Union[AuthUser, AuthFailure]


def login_location(path: str) -> str:
    return f"{LOGIN_PATH}?redirectTo={quote(path or HOME_PATH, safe='')}"


class SessionGate:
    """Turns a request's session cookie into an authorization decision.

    Holds no per-user state; every lookup goes to the session store.
    """

    def __init__(self, store: SessionStore, cookie: SessionCookie) -> None:
        self.store = store
        self.cookie = cookie

    def session_id(self, request: Request) -> Optional[str]:
        return self.cookie.loads(request.cookies.get(self.cookie.name))

    def current_user(self, request: Request) -> Optional[AuthUser]:
        sid = self.session_id(request)
        if not sid:
            return None
        return self.store.resolve(sid)

    def authorize(
        self,
        user: Optional[AuthUser],
        path: str,
        allowed_roles: Optional[Iterable[Role]] = None,
    ) -> AuthOutcome:
        if user is None:
            return AuthFailure(FailureKind.UNAUTHENTICATED, login_location(path))
        if allowed_roles is not None and not is_allowed(user.role, allowed_roles):
            return AuthFailure(FailureKind.FORBIDDEN, HOME_PATH)
        return user

    def require_user(self, request: Request) -> AuthOutcome:
        return self.authorize(self.current_user(request), request.url.path)

    def require_user_with_role(self, request: Request, allowed_roles: Iterable[Role]) -> AuthOutcome:
        return self.authorize(self.current_user(request), request.url.path, allowed_roles)

    def login(self, user_id: int, redirect_to: Optional[str] = None) -> RedirectResponse:
        # redirect_to is used as given (see DESIGN.md, open redirect)
        token = self.store.create(user_id)
        resp = RedirectResponse(url=redirect_to or ADMIN_HOME_PATH, status_code=303)
        self.cookie.set_on(resp, token)
        logger.info("User %s logged in", user_id)
        return resp

    def logout(self, request: Request) -> RedirectResponse:
        sid = self.session_id(request)
        if sid:
            self.store.destroy(sid)
            logger.info("Session closed")
        resp = RedirectResponse(url=HOME_PATH, status_code=303)
        self.cookie.clear_on(resp)
        return resp


# ------------------ FastAPI dependencies ------------------


def get_gate(request: Request) -> SessionGate:
    return request.app.state.gate


def current_user_optional(request: Request) -> Optional[AuthUser]:
    if hasattr(request.state, "user"):
        return request.state.user
    return get_gate(request).current_user(request)


def enforce(request: Request, allowed_roles: Optional[Iterable[Role]]) -> AuthUser:
    outcome = get_gate(request).authorize(
        current_user_optional(request), request.url.path, allowed_roles
    )
    if isinstance(outcome, AuthFailure):
        raise HTTPException(status_code=303, headers={"Location": outcome.location})
    return outcome


def require_user(request: Request) -> AuthUser:
    return enforce(request, None)


def require_role(*roles: Role):
    allowed = frozenset(roles)

    def _dep(request: Request) -> AuthUser:
        return enforce(request, allowed)

    return _dep
