"""Shared fixtures: one app per run, one rolled-back transaction per test.

Application code commits freely (units of work, the SQL refresh store, the
audit sink). Those commits only release a SAVEPOINT on a connection whose
outer transaction is rolled back when the test ends.
"""

from __future__ import annotations

import os

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from vaxtrack.core.config import TestingConfig
from vaxtrack.core.extensions import db as _db
from vaxtrack.core.extensions import limiter
from vaxtrack.factory import create_app


@pytest.fixture(scope="session")
def app():
    os.environ.pop("DATABASE_URL", None)
    flask_app = create_app(TestingConfig, instance_relative_config=False)
    flask_app.logger.setLevel("WARNING")
    return flask_app


@pytest.fixture(scope="session")
def db(app):
    """Schema created once; the app context stays pushed for the whole run."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    with db.engine.connect() as conn:
        yield conn


@pytest.fixture()
def session(db, connection):
    """
    Session bound to ``connection`` inside an outer transaction.

    A SAVEPOINT is opened up front and reopened each time the session ends
    one, so ``commit()`` and ``rollback()`` from application code act on the
    SAVEPOINT only. ``db.session`` is swapped for this session meanwhile.
    """
    outer = connection.begin()
    connection.begin_nested()
    test_session = scoped_session(sessionmaker(bind=connection))

    @event.listens_for(test_session(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        if trans.nested and not trans._parent.nested:
            connection.begin_nested()

    app_session = db.session
    app_session.remove()
    db.session = test_session
    try:
        yield test_session
    finally:
        test_session.remove()
        db.session = app_session
        outer.rollback()


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    from faker import Faker

    Faker.seed(1337)
    return Faker()


@pytest.fixture(autouse=True)
def _reset_rate_limits(app):
    limiter.reset()


@pytest.fixture(autouse=True)
def _factories_session(session):
    """Factories persist through the per-test session."""
    from tests.factories import bind_session

    bind_session(session)
