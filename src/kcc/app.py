# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from kcc.auth.roles import ALL_ROLES, Role
from kcc.auth.session import SessionCookie
from kcc.auth.store import SessionStore
from kcc.auth.users import CredentialVerifier
from kcc.errors import InvalidCredentials, StorageError
from kcc.infra.db import Database
from kcc.permissions import (
    ADMIN_HOME_PATH,
    SessionGate,
    current_user_optional,
    require_role,
    require_user,
)

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

INVALID_LOGIN_MESSAGE = "Invalid email or password"

# Admin panel sections and who may open them.
ADMIN_SECTIONS = {
    "news": ("News", ALL_ROLES),
    "events": ("Events", ALL_ROLES),
    "clubs": ("Clubs", frozenset({Role.ADMIN})),
    "staff": ("Staff", frozenset({Role.ADMIN})),
    "alumni": ("Alumni", frozenset({Role.ADMIN})),
}


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the signed-in user."""
    base_ctx = {"current_user": getattr(request.state, "user", None)}
    merged = {**base_ctx, **(ctx or {})}
    return templates.TemplateResponse(request, template_name, merged, status_code=status_code)


def _storage_error_page(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request, "error.html", {"current_user": None}, status_code=500
    )


def create_app(
    db: Optional[Database] = None,
    *,
    cookie: Optional[SessionCookie] = None,
    store: Optional[SessionStore] = None,
) -> FastAPI:
    owns_db = db is None
    db = db or Database()
    db.create_all()
    store = store or SessionStore(db)
    gate = SessionGate(store, cookie or SessionCookie.from_env())
    verifier = CredentialVerifier(db)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        if owns_db:
            db.dispose()

    app = FastAPI(title="Kekirawa Central College", lifespan=lifespan)
    app.state.db = db
    app.state.gate = gate
    app.state.verifier = verifier

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        try:
            request.state.user = await run_in_threadpool(gate.current_user, request)
        except StorageError:
            return _storage_error_page(request)
        return await call_next(request)

    @app.exception_handler(StorageError)
    async def _storage_error_handler(request: Request, exc: StorageError):
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc)
        return _storage_error_page(request)

    # ------------------ Routes ------------------

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return _render(request, "home.html")

    @app.get("/login", response_class=HTMLResponse)
    def login_get(request: Request, redirectTo: str = ADMIN_HOME_PATH):
        redirect_to = redirectTo or ADMIN_HOME_PATH
        if current_user_optional(request):
            return RedirectResponse(url=redirect_to, status_code=303)
        return _render(request, "login.html", {"redirect_to": redirect_to, "email": ""})

    @app.post("/login")
    def login_post(
        request: Request,
        email: str = Form(""),
        password: str = Form(""),
        redirectTo: str = Form(ADMIN_HOME_PATH),
    ):
        email = (email or "").strip()
        redirect_to = redirectTo or ADMIN_HOME_PATH

        field_errors = {}
        if not email:
            field_errors["email"] = "Email is required"
        if not password:
            field_errors["password"] = "Password is required"
        if field_errors:
            return _render(
                request,
                "login.html",
                {"redirect_to": redirect_to, "email": email, "field_errors": field_errors},
                status_code=400,
            )

        try:
            user_id = verifier.verify(email, password)
        except InvalidCredentials:
            return _render(
                request,
                "login.html",
                {"redirect_to": redirect_to, "email": email, "error": INVALID_LOGIN_MESSAGE},
                status_code=400,
            )
        return gate.login(user_id, redirect_to)

    @app.get("/logout")
    def logout_get():
        return RedirectResponse(url="/", status_code=303)

    @app.post("/logout")
    def logout_post(request: Request):
        return gate.logout(request)

    @app.get("/admin", response_class=HTMLResponse)
    def admin_home(request: Request, user=Depends(require_user)):
        sections = [
            {"slug": slug, "title": title}
            for slug, (title, roles) in ADMIN_SECTIONS.items()
            if user.role in roles
        ]
        return _render(request, "admin.html", {"user": user, "sections": sections})

    def _section_view(slug: str, title: str, roles):
        def view(request: Request, user=Depends(require_role(*roles))):
            return _render(request, "admin_section.html", {"user": user, "title": title, "slug": slug})

        return view

    for slug, (title, roles) in ADMIN_SECTIONS.items():
        app.add_api_route(
            f"/admin/{slug}",
            _section_view(slug, title, roles),
            methods=["GET"],
            response_class=HTMLResponse,
            name=f"admin_{slug}",
        )

    return app
