"""
Contract tests shared by every RefreshTokenStore implementation.

The same scenarios run against the in-memory double, the SQL store and the
Redis store (backed by fakeredis).
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from sqlalchemy.exc import OperationalError

from tests.factories.user import UserFactory
from vaxtrack.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from vaxtrack.infra.sql.sql_refresh_token_store import SqlRefreshTokenStore
from vaxtrack.services._shared.ports import InMemoryRefreshTokenStore, RotationResult
from vaxtrack.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


def _now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture(params=["memory", "sql", "redis"])
def store(request, session):
    if request.param == "memory":
        return InMemoryRefreshTokenStore()
    if request.param == "sql":
        return SqlRefreshTokenStore()
    r = fakeredis.FakeRedis()
    r.flushall()
    return RedisRefreshTokenStore(r=r)


@pytest.fixture()
def user_id(session):
    user = UserFactory()
    session.commit()
    return user.id


def _register(store, jti: str, user_id: int, family_id: str = "fam-1", ttl: int = 300):
    now = _now()
    store.register(
        jti=jti,
        user_id=user_id,
        family_id=family_id,
        issued_at=now,
        expires_at=now + timedelta(seconds=ttl),
    )


def _rotate(store, old: str, new: str, *, at: datetime | None = None) -> RotationResult:
    now = at or _now()
    return store.rotate(
        old_jti=old, new_jti=new, now=now, new_expires_at=now + timedelta(seconds=300)
    )


def test_register_and_get(store, user_id):
    _register(store, "jti-1", user_id)

    view = store.get("jti-1")
    assert view is not None
    assert view.user_id == user_id
    assert view.family_id == "fam-1"
    assert view.used is False
    assert view.revoked is False
    assert store.get("missing") is None


def test_rotate_once_then_reuse_is_detected(store, user_id):
    _register(store, "jti-1", user_id)

    assert _rotate(store, "jti-1", "jti-2") is RotationResult.OK
    assert _rotate(store, "jti-1", "jti-3") is RotationResult.REUSED

    old = store.get("jti-1")
    new = store.get("jti-2")
    assert old.used is True
    assert old.replaced_by == "jti-2"
    assert new.family_id == "fam-1"
    assert new.user_id == user_id
    assert store.get("jti-3") is None


def test_rotate_unknown_jti(store, user_id):
    assert _rotate(store, "nope", "jti-2") is RotationResult.NOT_FOUND


def test_rotate_expired_session(store, user_id):
    _register(store, "jti-1", user_id, ttl=60)

    result = _rotate(store, "jti-1", "jti-2", at=_now() + timedelta(seconds=120))
    assert result is RotationResult.EXPIRED


def test_revoke_family_blocks_rotation_and_deactivates_lineage(store, user_id):
    _register(store, "jti-1", user_id, family_id="fam-a")
    _register(store, "jti-2", user_id, family_id="fam-b")

    assert store.is_family_active("fam-a")
    assert store.revoke_family("fam-a") == 1

    assert not store.is_family_active("fam-a")
    assert store.is_family_active("fam-b")
    assert _rotate(store, "jti-1", "jti-3") is RotationResult.REVOKED


def test_revoke_all_for_user(store, user_id):
    _register(store, "jti-1", user_id, family_id="fam-a")
    _register(store, "jti-2", user_id, family_id="fam-b")

    assert store.revoke_all_for_user(user_id) == 2
    assert not store.is_family_active("fam-a")
    assert not store.is_family_active("fam-b")


def test_unknown_family_is_inactive(store):
    assert not store.is_family_active("never-issued")


def test_new_ids_are_unique(store):
    assert store.new_jti() != store.new_jti()
    assert store.new_family_id() != store.new_family_id()


def test_in_memory_concurrent_rotation_has_single_winner():
    store = InMemoryRefreshTokenStore()
    _register(store, "jti-0", 1)
    workers = 8
    barrier = threading.Barrier(workers)
    results: list[RotationResult] = []
    lock = threading.Lock()

    def attempt(i: int) -> None:
        barrier.wait()
        outcome = _rotate(store, "jti-0", f"jti-new-{i}")
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=attempt, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(RotationResult.OK) == 1
    assert results.count(RotationResult.REUSED) == workers - 1


def test_sql_rotate_retry_after_lost_commit_ack_is_not_reuse(session, user_id, monkeypatch):
    store = SqlRefreshTokenStore()
    _register(store, "jti-0", user_id)
    real_commit = SQLAlchemyUnitOfWork.commit
    dropped: list[bool] = []

    def commit_then_drop_connection(self):
        real_commit(self)
        if not dropped:
            dropped.append(True)
            raise OperationalError("COMMIT", None, Exception("server closed the connection"))

    monkeypatch.setattr(SQLAlchemyUnitOfWork, "commit", commit_then_drop_connection)

    assert _rotate(store, "jti-0", "jti-1") is RotationResult.OK
    assert dropped == [True]
    assert store.get("jti-0").replaced_by == "jti-1"
    assert store.is_family_active("fam-1")
    # a different caller presenting the consumed token is still reuse
    assert _rotate(store, "jti-0", "jti-2") is RotationResult.REUSED
