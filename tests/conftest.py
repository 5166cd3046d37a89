import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from datetime import datetime, timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from kcc.app import create_app
from kcc.auth.roles import Role
from kcc.auth.session import SessionCookie
from kcc.auth.store import SessionStore
from kcc.auth.users import create_user
from kcc.infra.db import Database

PASSWORD = "correct-horse-battery"


class FakeClock:
    """Controllable replacement for the session store's utcnow."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(f"sqlite:///{tmp_path / 'kcc.db'}")
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 3, 1, 9, 0, 0))


@pytest.fixture()
def store(db, clock) -> SessionStore:
    return SessionStore(db, clock=clock)


@pytest.fixture()
def users(db):
    """One user per role, all with PASSWORD."""
    return {
        Role.ADMIN: create_user(
            db, full_name="Nimal Perera", email="admin@kcc.lk", password=PASSWORD, role=Role.ADMIN
        ),
        Role.AUTHOR: create_user(
            db, full_name="Kamala Silva", email="author@kcc.lk", password=PASSWORD, role=Role.AUTHOR
        ),
        Role.CLUB_REP: create_user(
            db,
            full_name="Ravi Fernando",
            email="clubs@kcc.lk",
            password=PASSWORD,
            role=Role.CLUB_REP,
            club_id=3,
        ),
    }


@pytest.fixture()
def cookie() -> SessionCookie:
    return SessionCookie(secret="test-secret")


@pytest.fixture()
def app(db, store, cookie):
    return create_app(db, cookie=cookie, store=store)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def login(client):
    """POST the login form and return the response (redirects not followed)."""

    def _login(email: str, password: str = PASSWORD, redirect_to: str = "/admin"):
        return client.post(
            "/login",
            data={"email": email, "password": password, "redirectTo": redirect_to},
            follow_redirects=False,
        )

    return _login
