"""Extension singletons, created unbound and attached in :func:`init_app`."""

from __future__ import annotations

import redis  # type: ignore[import-untyped]
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError  # type: ignore[import-untyped]
from sqlalchemy import MetaData

# Deterministic constraint names keep Alembic autogenerate diffs stable.
NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

REDIS_EXTENSION_KEY = "vaxtrack.redis"

db: SQLAlchemy = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
# Client IP comes from ProxyFix when USE_PROXYFIX is on.
limiter = Limiter(key_func=get_remote_address)


def _connect_redis(url: str) -> redis.Redis:
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Redis at {url!r} is unreachable") from exc
    return client


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and rate limiter to ``app``.

    A Redis client is opened only when ``REDIS_URL`` is configured; it backs
    the ``redis`` refresh-session store. The models package is imported here
    so Alembic sees the full metadata.
    """
    db.init_app(app)
    from vaxtrack import models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    url = app.config.get("REDIS_URL")
    if url:
        app.extensions[REDIS_EXTENSION_KEY] = _connect_redis(url)
    else:
        app.extensions.pop(REDIS_EXTENSION_KEY, None)


def get_redis(app: Flask | None = None) -> redis.Redis:
    """Redis client of ``app`` (default: the current app); raises when none was configured."""
    client = (app or current_app).extensions.get(REDIS_EXTENSION_KEY)
    if client is None:
        raise RuntimeError("REDIS_URL is not configured for this application.")
    return client
