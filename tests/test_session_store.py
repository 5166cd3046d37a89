from datetime import timedelta

from sqlalchemy import func, select

from kcc.auth.roles import Role
from kcc.auth.store import SessionStore
from kcc.infra.models import Session


def _session_count(db) -> int:
    with db.session() as s:
        return s.scalar(select(func.count()).select_from(Session))


def test_create_then_resolve_returns_owner(store, users):
    admin = users[Role.ADMIN]
    token = store.create(admin.id)
    user = store.resolve(token)
    assert user == admin
    assert user.role is Role.ADMIN


def test_tokens_are_long_and_unique(store, users):
    tokens = {store.create(users[Role.AUTHOR].id) for _ in range(20)}
    assert len(tokens) == 20
    assert all(len(t) >= 43 for t in tokens)


def test_resolve_carries_full_profile(store, users):
    rep = users[Role.CLUB_REP]
    user = store.resolve(store.create(rep.id))
    assert (user.id, user.full_name, user.email, user.club_id) == (rep.id, "Ravi Fernando", "clubs@kcc.lk", 3)


def test_session_valid_until_expiry(store, users, clock):
    token = store.create(users[Role.ADMIN].id)
    clock.advance(timedelta(days=7) - timedelta(seconds=1))
    assert store.resolve(token) is not None


def test_expired_session_is_absent_but_row_remains(db, store, users, clock):
    token = store.create(users[Role.ADMIN].id)
    clock.advance(timedelta(days=7))
    assert store.resolve(token) is None
    clock.advance(timedelta(days=30))
    assert store.resolve(token) is None
    assert _session_count(db) == 1


def test_unknown_and_empty_tokens_resolve_to_none(store, users):
    assert store.resolve("no-such-token") is None
    assert store.resolve("") is None
    assert store.resolve(None) is None


def test_destroy_is_idempotent(store, users):
    token = store.create(users[Role.ADMIN].id)
    store.destroy(token)
    assert store.resolve(token) is None
    store.destroy(token)
    store.destroy("never-existed")
    assert store.resolve("never-existed") is None


def test_sessions_per_user_are_independent(store, users):
    uid = users[Role.AUTHOR].id
    first = store.create(uid)
    second = store.create(uid)
    store.destroy(first)
    assert store.resolve(first) is None
    assert store.resolve(second).id == uid


def test_purge_expired_removes_only_expired(db, store, users, clock):
    old = store.create(users[Role.ADMIN].id)
    clock.advance(timedelta(days=5))
    fresh = store.create(users[Role.ADMIN].id)
    clock.advance(timedelta(days=3))

    assert store.purge_expired() == 1
    assert _session_count(db) == 1
    assert store.resolve(old) is None
    assert store.resolve(fresh) is not None


def test_custom_ttl(db, users, clock):
    short = SessionStore(db, ttl=timedelta(minutes=5), clock=clock)
    token = short.create(users[Role.ADMIN].id)
    clock.advance(timedelta(minutes=5))
    assert short.resolve(token) is None
