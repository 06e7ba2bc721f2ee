"""
Concurrent rotation of one refresh token against the real stores.

The SQL case runs on a file-backed SQLite engine with its own connection per
thread, since the per-test ``session`` shares a single connection.
``BEGIN IMMEDIATE`` makes SQLite queue writers on its busy timeout instead
of failing lock upgrades.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import fakeredis
import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import scoped_session, sessionmaker

from vaxtrack.core.extensions import db
from vaxtrack.infra.jwt.pyjwt_token_provider import PyJWTTokenProvider
from vaxtrack.infra.redis.redis_refresh_token_store import RedisRefreshTokenStore
from vaxtrack.infra.sql.sql_refresh_token_store import SqlRefreshTokenStore
from vaxtrack.models.user import User
from vaxtrack.services._shared.errors import InvalidTokenError, TokenReusedError
from vaxtrack.services._shared.ports import RotationResult
from vaxtrack.services.tokens.service import TokenService

WORKERS = 6


@dataclass
class _User:
    id: int
    role: str = "parent"


@pytest.fixture()
def file_backed_db(tmp_path, session):
    """Point ``db.session`` at a thread-local session factory over a SQLite file."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'rotation.db'}", connect_args={"timeout": 30}
    )

    @event.listens_for(engine, "connect")
    def _manual_transactions(dbapi_conn, record):
        dbapi_conn.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    db.metadata.create_all(engine)
    per_thread = scoped_session(sessionmaker(bind=engine))
    test_session = db.session
    db.session = per_thread
    try:
        owner = User(email="race@example.com", password_hash="unused")
        per_thread.add(owner)
        per_thread.commit()
        owner_id = owner.id
        # release the main thread's write lock before any worker starts
        per_thread.remove()
        yield owner_id
    finally:
        per_thread.remove()
        db.session = test_session
        engine.dispose()


@pytest.fixture(params=["sql", "redis"])
def racing_store(request):
    """``(store, user_id)`` for each shared backend."""
    if request.param == "sql":
        user_id = request.getfixturevalue("file_backed_db")
        return SqlRefreshTokenStore(), user_id
    return RedisRefreshTokenStore(r=fakeredis.FakeRedis()), 1


def _race(workers: int, fn: Callable[[int], object]) -> list[object]:
    """Start ``workers`` threads on a barrier; collect results or exceptions."""
    barrier = threading.Barrier(workers)
    outcomes: list[object] = []
    lock = threading.Lock()

    def run(i: int) -> None:
        barrier.wait()
        try:
            outcome = fn(i)
        except Exception as exc:  # noqa: BLE001
            outcome = exc
        finally:
            db.session.remove()
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=run, args=(i,)) for i in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes


def test_store_rotation_has_single_winner(racing_store):
    store, user_id = racing_store
    now = datetime.now(timezone.utc)
    store.register(
        jti="jti-0",
        user_id=user_id,
        family_id="fam-race",
        issued_at=now,
        expires_at=now + timedelta(minutes=5),
    )

    def rotate(i: int) -> RotationResult:
        at = datetime.now(timezone.utc)
        return store.rotate(
            old_jti="jti-0",
            new_jti=f"jti-{i + 1}",
            now=at,
            new_expires_at=at + timedelta(minutes=5),
        )

    outcomes = _race(WORKERS, rotate)

    assert outcomes.count(RotationResult.OK) == 1
    assert outcomes.count(RotationResult.REUSED) == WORKERS - 1
    winner = store.get("jti-0").replaced_by
    assert store.get(winner).family_id == "fam-race"


def test_token_service_race_yields_one_pair_and_one_reuse(racing_store):
    store, user_id = racing_store
    tokens = TokenService(
        provider=PyJWTTokenProvider(
            access_secret="access-secret-for-tests-0123456789",
            refresh_secret="refresh-secret-for-tests-9876543210",
        ),
        store=store,
    )
    pair = tokens.issue(_User(id=user_id))

    outcomes = _race(2, lambda i: tokens.rotate(pair.refresh_token, lambda uid: "parent"))

    rotated = [o for o in outcomes if not isinstance(o, Exception)]
    reused = [o for o in outcomes if isinstance(o, TokenReusedError)]
    assert len(rotated) == 1
    assert len(reused) == 1
    # the reuse revoked the lineage, so the winning pair is dead too
    with pytest.raises(InvalidTokenError):
        tokens.verify_access(rotated[0].access_token)
