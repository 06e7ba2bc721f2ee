"""factory_boy factories persisting through the per-test session."""

from __future__ import annotations

import factory
from sqlalchemy.orm import scoped_session

_bound: scoped_session | None = None


def bind_session(session: scoped_session) -> None:
    global _bound
    _bound = session


def current_session() -> scoped_session:
    if _bound is None:
        raise RuntimeError("No session bound; request the 'session' fixture first.")
    return _bound


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Rows are flushed, not committed; tests commit when they need to."""

    class Meta:
        abstract = True
        sqlalchemy_session_factory = current_session
        sqlalchemy_session_persistence = "flush"
